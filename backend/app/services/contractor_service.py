"""Contractor profile storage."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.user import CONTRACTOR_ROLE, User
from app.schemas.contractor import ContractorCreate

logger = get_logger(__name__)


async def create_contractor(db: AsyncSession, data: ContractorCreate) -> User:
    """Note: This function commits the transaction."""
    user = User(
        id=str(uuid.uuid4()),
        email=data.email,
        name=data.name,
        role=CONTRACTOR_ROLE,
        location=data.location,
        skills=list(data.skills),
        professional_title=data.professional_title,
        bio=data.bio,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Contractor created", contractor_id=user.id, skills=len(user.skills or []))
    return user
