"""Project persistence: the only place project rows are read or written."""

import uuid
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, NotFoundError
from app.core.logging import get_logger
from app.models.project import Project
from app.schemas.project import ProjectCreate

logger = get_logger(__name__)


async def create_project(db: AsyncSession, data: ProjectCreate) -> Project:
    """Create a project with an empty roadmap and history.

    Note: This function commits the transaction.
    """
    project = Project(
        id=str(uuid.uuid4()),
        name=data.name,
        client_name=data.client_name,
        description=data.description,
        start_date=data.start_date,
        deadline=data.deadline,
        budget=data.budget,
        location=data.location,
        required_skills=list(data.required_skills),
        tags=list(data.tags),
        roadmap=[],
        edit_history=[],
        roadmap_version=0,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)

    logger.info("Project created", project_id=project.id, name=project.name)
    return project


async def load_project(db: AsyncSession, project_id: str, *, operation: str = "fetch") -> Project:
    """Get a project by ID.

    Raises:
        NotFoundError: if no project has this ID.
    """
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError(f"project '{project_id}' not found", operation=operation)
    return project


async def list_projects(db: AsyncSession) -> list[Project]:
    result = await db.execute(select(Project).order_by(Project.created_at.desc()))
    return list(result.scalars().all())


async def save_project(
    db: AsyncSession,
    project_id: str,
    *,
    roadmap: list[dict[str, Any]] | None = None,
    edit_history: list[dict[str, Any]] | None = None,
    expected_version: int | None = None,
) -> Project:
    """Write a project's roadmap and/or edit history.

    No other project field is touched. Every write bumps
    ``roadmap_version`` in the same UPDATE statement; when
    ``expected_version`` is given the row is only written if the stored
    version still equals it, otherwise nothing is written.

    Note: This function commits the transaction.

    Raises:
        NotFoundError: if no project has this ID.
        ConflictError: if ``expected_version`` is stale.
    """
    values: dict[str, Any] = {"roadmap_version": Project.roadmap_version + 1}
    if roadmap is not None:
        values["roadmap"] = roadmap
    if edit_history is not None:
        values["edit_history"] = edit_history

    stmt = update(Project).where(Project.id == project_id).values(**values)
    if expected_version is not None:
        stmt = stmt.where(Project.roadmap_version == expected_version)
    result = await db.execute(stmt.execution_options(synchronize_session=False))

    if result.rowcount == 0:
        await db.rollback()
        project = await _reload(db, project_id, operation="save")
        logger.warning(
            "Rejected stale roadmap save",
            project_id=project_id,
            expected_version=expected_version,
            current_version=project.roadmap_version,
        )
        raise ConflictError(
            f"roadmap changed since version {expected_version}",
            operation="save",
            current_version=project.roadmap_version,
        )

    await db.commit()
    project = await _reload(db, project_id, operation="save")

    logger.info("Project roadmap saved", project_id=project_id, version=project.roadmap_version)
    return project


async def _reload(db: AsyncSession, project_id: str, *, operation: str) -> Project:
    """Load a project, overwriting any stale copy held by the session."""
    project = await db.get(Project, project_id, populate_existing=True)
    if project is None:
        raise NotFoundError(f"project '{project_id}' not found", operation=operation)
    return project
