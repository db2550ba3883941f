"""User model. Contractors are users with role ``contractor``."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

CONTRACTOR_ROLE = "contractor"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True)
    name: Mapped[str] = mapped_column(String)
    role: Mapped[str] = mapped_column(String)  # admin, manager, client, contractor
    location: Mapped[str | None] = mapped_column(String, default=None)

    # Contractor-specific
    professional_title: Mapped[str | None] = mapped_column(String, default=None)
    skills: Mapped[list[str] | None] = mapped_column(JSON, default=list)
    bio: Mapped[str | None] = mapped_column(Text, default=None)

    joined_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
