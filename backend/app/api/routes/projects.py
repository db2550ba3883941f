"""Project routes."""

from fastapi import APIRouter, status

from app.api.deps import DBSession
from app.api.errors import http_error
from app.core.errors import RoadmapError
from app.models.project import Project
from app.schemas.contractor import MatchResponse
from app.schemas.project import ProjectCreate, ProjectResponse
from app.services import matching_service, project_service

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, db: DBSession) -> Project:
    return await project_service.create_project(db, data)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(db: DBSession) -> list[Project]:
    """List projects, newest first."""
    return await project_service.list_projects(db)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, db: DBSession) -> Project:
    try:
        return await project_service.load_project(db, project_id)
    except RoadmapError as exc:
        raise http_error(exc) from exc


@router.get("/{project_id}/matches", response_model=MatchResponse)
async def match_project_contractors(project_id: str, db: DBSession) -> MatchResponse:
    """Contractors whose location and skills satisfy the project's requirements."""
    try:
        project = await project_service.load_project(db, project_id, operation="match")
    except RoadmapError as exc:
        raise http_error(exc) from exc
    requirement, pool, matches = await matching_service.match_project_contractors(db, project)
    return MatchResponse(requirement=requirement, pool_size=len(pool), matches=matches)
