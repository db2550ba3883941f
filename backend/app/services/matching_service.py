"""Contractor matching: filter a contractor pool against project requirements."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.project import Project
from app.models.user import CONTRACTOR_ROLE, User
from app.schemas.contractor import ContractorProfile, MatchRequirement

logger = get_logger(__name__)


def contractor_matches(contractor: ContractorProfile, requirement: MatchRequirement) -> bool:
    """Check one contractor against a requirement.

    Location is a case-sensitive substring test, so "Pune" matches
    "Pune, India". Every required skill must appear verbatim in the
    contractor's skills; extra skills are fine. Unset criteria always pass.
    """
    if requirement.location and requirement.location not in contractor.location:
        return False
    return requirement.required_skills <= set(contractor.skills)


def match_contractors(
    requirement: MatchRequirement,
    pool: Iterable[ContractorProfile],
) -> list[ContractorProfile]:
    """Return the contractors that satisfy ``requirement``, in pool order."""
    return [contractor for contractor in pool if contractor_matches(contractor, requirement)]


def requirement_for_project(project: Project) -> MatchRequirement:
    return MatchRequirement(
        location=project.location,
        required_skills=set(project.required_skills or []),
    )


async def list_contractors(db: AsyncSession, location: str | None = None) -> list[ContractorProfile]:
    """Load the contractor pool, optionally narrowed to a location."""
    result = await db.execute(
        select(User).where(User.role == CONTRACTOR_ROLE).order_by(User.joined_date.desc())
    )
    pool = [ContractorProfile.model_validate(user) for user in result.scalars().all()]
    if location:
        pool = match_contractors(MatchRequirement(location=location), pool)
    return pool


async def match_project_contractors(
    db: AsyncSession,
    project: Project,
) -> tuple[MatchRequirement, list[ContractorProfile], list[ContractorProfile]]:
    """Match the stored contractor pool against a project's location and skills.

    Returns the requirement used, the pool and the matches.
    """
    requirement = requirement_for_project(project)
    pool = await list_contractors(db)
    matches = match_contractors(requirement, pool)
    logger.info(
        "Matched contractors for project",
        project_id=project.id,
        pool_size=len(pool),
        matches=len(matches),
    )
    return requirement, pool, matches
