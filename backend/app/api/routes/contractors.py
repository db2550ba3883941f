"""Contractor routes."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import IntegrityError

from app.api.deps import DBSession
from app.core.logging import get_logger
from app.schemas.contractor import (
    ContractorCreate,
    ContractorProfile,
    MatchRequirement,
    MatchResponse,
)
from app.services import contractor_service, matching_service

logger = get_logger(__name__)
router = APIRouter(prefix="/contractors", tags=["contractors"])


@router.post("", response_model=ContractorProfile, status_code=status.HTTP_201_CREATED)
async def create_contractor(data: ContractorCreate, db: DBSession) -> ContractorProfile:
    try:
        user = await contractor_service.create_contractor(db, data)
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Contractor with this email already exists",
        ) from exc
    return ContractorProfile.model_validate(user)


@router.get("", response_model=list[ContractorProfile])
async def list_contractors(db: DBSession, location: str | None = None) -> list[ContractorProfile]:
    return await matching_service.list_contractors(db, location=location)


@router.post("/match", response_model=MatchResponse)
async def match_contractors(requirement: MatchRequirement, db: DBSession) -> MatchResponse:
    """Filter the contractor pool by location substring and required skills."""
    pool = await matching_service.list_contractors(db)
    matches = matching_service.match_contractors(requirement, pool)
    logger.info(
        "Contractor match",
        location=requirement.location,
        skills=sorted(requirement.required_skills),
        matches=len(matches),
    )
    return MatchResponse(requirement=requirement, pool_size=len(pool), matches=matches)
