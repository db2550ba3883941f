"""Shared fixtures: in-memory database, fixture roadmap generator, API client."""

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.agent.roadmap_generator import RoadmapGenerationRequest, build_roadmap
from app.api.deps import get_db, get_roadmap_generator
from app.core.database import Base
from app.main import app as fastapi_app
from app.models import Project
from app.schemas.project import ProjectCreate
from app.schemas.roadmap import RoadmapDocument
from app.services import project_service


def roadmap_payload(prefix: str = "") -> dict[str, Any]:
    """A generator reply in the collaborator's ``{"roadmap": [...]}`` shape."""
    return {
        "roadmap": [
            {
                "id": "p1",
                "name": f"{prefix}Planning & Design",
                "description": "Survey the site and agree on plans",
                "milestones": [
                    {"id": "m1", "name": f"{prefix}Site survey", "description": "Measure the lot", "status": "Pending"},
                    {"id": "m2", "name": f"{prefix}Permits", "description": "File permit applications", "status": "Pending"},
                ],
            },
            {
                "id": "p2",
                "name": f"{prefix}Construction",
                "description": "Build the structure",
                "milestones": [
                    {"id": "m3", "name": f"{prefix}Foundation", "description": "Pour the foundation", "status": "Pending"},
                    {"id": "m4", "name": f"{prefix}Framing", "description": "Frame walls and roof", "status": "Pending"},
                ],
            },
            {
                "id": "p3",
                "name": f"{prefix}Handover",
                "description": "Inspect and hand over",
                "milestones": [
                    {"id": "m5", "name": f"{prefix}Final inspection", "description": "City inspection", "status": "Pending"},
                ],
            },
        ]
    }


class FixtureRoadmapGenerator:
    """Returns canned payloads in order, or raises a preset error."""

    def __init__(self, payloads: list[Any] | None = None, error: Exception | None = None) -> None:
        self.payloads = list(payloads or [roadmap_payload()])
        self.error = error
        self.requests: list[RoadmapGenerationRequest] = []

    async def generate(self, request: RoadmapGenerationRequest) -> RoadmapDocument:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        payload = self.payloads.pop(0) if len(self.payloads) > 1 else self.payloads[0]
        return build_roadmap(payload)


@pytest.fixture
def sample_roadmap() -> RoadmapDocument:
    return build_roadmap(roadmap_payload())


@pytest.fixture
def fixture_generator() -> FixtureRoadmapGenerator:
    return FixtureRoadmapGenerator()


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed_project(test_session: AsyncSession) -> Project:
    return await project_service.create_project(
        test_session,
        ProjectCreate(
            name="Riverside Duplex",
            client_name="Acme Homes",
            description="Build a two-unit duplex with a shared garage on a riverside lot.",
            start_date=datetime(2026, 3, 1),
            deadline=datetime(2026, 12, 15),
            budget=420000.0,
            location="Austin",
            required_skills=["Framing"],
        ),
    )


@pytest_asyncio.fixture
async def client(
    test_session: AsyncSession,
    fixture_generator: FixtureRoadmapGenerator,
) -> AsyncGenerator[AsyncClient, None]:
    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        yield test_session

    fastapi_app.dependency_overrides[get_db] = _get_db
    fastapi_app.dependency_overrides[get_roadmap_generator] = lambda: fixture_generator
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()
