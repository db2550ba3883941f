"""Project model; roadmap and edit history live on the project row."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String)
    client_name: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String, default="Planning")

    start_date: Mapped[datetime] = mapped_column(DateTime)
    deadline: Mapped[datetime] = mapped_column(DateTime)
    budget: Mapped[float] = mapped_column(Float, default=0.0)

    # Matching inputs (read-only for the roadmap core)
    location: Mapped[str | None] = mapped_column(String, default=None)
    required_skills: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Nested phase -> milestone document and its parallel audit trail
    roadmap: Mapped[list[dict[str, object]]] = mapped_column(JSON, default=list)
    edit_history: Mapped[list[dict[str, object]]] = mapped_column(JSON, default=list)
    roadmap_version: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
