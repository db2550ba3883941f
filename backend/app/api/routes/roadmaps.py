"""Project roadmap routes."""

from fastapi import APIRouter, status

from app.api.deps import DBSession, RoadmapGeneratorDep
from app.api.errors import http_error
from app.core.errors import RoadmapError
from app.core.logging import get_logger
from app.models.project import Project
from app.schemas.roadmap import (
    EditHistoryEntry,
    MilestoneCreate,
    RoadmapDocument,
    RoadmapEditRequest,
    RoadmapProgress,
    RoadmapResponse,
)
from app.services import roadmap_service

logger = get_logger(__name__)
router = APIRouter(prefix="/projects/{project_id}/roadmap", tags=["roadmaps"])


def _roadmap_response(project: Project, roadmap: RoadmapDocument | None = None) -> RoadmapResponse:
    if roadmap is None:
        roadmap = RoadmapDocument.from_storage(project.roadmap)
    return RoadmapResponse(
        project_id=project.id,
        phases=roadmap.phases,
        edit_history=roadmap_service.load_history(project),
        roadmap_version=project.roadmap_version,
    )


@router.get("", response_model=RoadmapResponse)
async def get_roadmap(project_id: str, db: DBSession) -> RoadmapResponse:
    """Get a project's roadmap, edit history and version.

    An empty ``phases`` list means no roadmap has been generated yet.
    """
    try:
        project, roadmap = await roadmap_service.get_project_roadmap(db, project_id)
    except RoadmapError as exc:
        raise http_error(exc) from exc
    return _roadmap_response(project, roadmap)


@router.post("/generate", response_model=RoadmapResponse)
async def generate_roadmap(
    project_id: str,
    db: DBSession,
    generator: RoadmapGeneratorDep,
    persist: bool = True,
    expected_version: int | None = None,
) -> RoadmapResponse:
    """Generate a new roadmap from the project description and dates.

    With ``persist`` (the default) the result replaces the stored roadmap;
    otherwise it is returned as a draft and nothing is written.
    """
    try:
        project, roadmap = await roadmap_service.generate_project_roadmap(
            db,
            project_id,
            generator,
            persist=persist,
            expected_version=expected_version,
        )
    except RoadmapError as exc:
        logger.warning("Roadmap generation failed", project_id=project_id, error=str(exc))
        raise http_error(exc) from exc
    return _roadmap_response(project, roadmap)


@router.patch("", response_model=RoadmapResponse)
async def save_roadmap_edits(
    project_id: str,
    data: RoadmapEditRequest,
    db: DBSession,
) -> RoadmapResponse:
    """Apply milestone edits and record one edit history entry."""
    try:
        project = await roadmap_service.save_roadmap_edits(
            db,
            project_id,
            data.edits,
            editor=data.editor,
            expected_version=data.expected_version,
        )
    except RoadmapError as exc:
        raise http_error(exc) from exc
    return _roadmap_response(project)


@router.post(
    "/phases/{phase_id}/milestones",
    response_model=RoadmapResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_milestone(
    project_id: str,
    phase_id: str,
    data: MilestoneCreate,
    db: DBSession,
) -> RoadmapResponse:
    try:
        project, _ = await roadmap_service.add_project_milestone(
            db,
            project_id,
            phase_id,
            name=data.name,
            description=data.description,
            editor=data.editor,
            expected_version=data.expected_version,
        )
    except RoadmapError as exc:
        raise http_error(exc) from exc
    return _roadmap_response(project)


@router.get("/history", response_model=list[EditHistoryEntry])
async def get_edit_history(project_id: str, db: DBSession) -> list[EditHistoryEntry]:
    """Edit history, oldest first."""
    try:
        project, _ = await roadmap_service.get_project_roadmap(db, project_id)
    except RoadmapError as exc:
        raise http_error(exc) from exc
    return roadmap_service.load_history(project)


@router.get("/progress", response_model=RoadmapProgress)
async def get_roadmap_progress(project_id: str, db: DBSession) -> RoadmapProgress:
    try:
        return await roadmap_service.get_roadmap_progress(db, project_id)
    except RoadmapError as exc:
        raise http_error(exc) from exc
