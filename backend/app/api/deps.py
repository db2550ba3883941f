"""API dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.agent.roadmap_generator import LLMRoadmapGenerator, RoadmapGenerator
from app.core.database import get_db_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with get_db_session() as session:
        yield session


def get_roadmap_generator() -> RoadmapGenerator:
    """Roadmap generator dependency; overridden in tests with a fixture generator."""
    return LLMRoadmapGenerator()


DBSession = Annotated[AsyncSession, Depends(get_db)]
RoadmapGeneratorDep = Annotated[RoadmapGenerator, Depends(get_roadmap_generator)]
