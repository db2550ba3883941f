"""Database models."""

from app.models.project import Project
from app.models.user import CONTRACTOR_ROLE, User

__all__ = [
    "CONTRACTOR_ROLE",
    "Project",
    "User",
]
