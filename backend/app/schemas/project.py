"""Project schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from app.schemas.roadmap import EditHistoryEntry, RoadmapPhase

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ProjectCreate(BaseModel):
    name: NonBlank
    client_name: str
    description: NonBlank
    start_date: datetime
    deadline: datetime
    budget: float = 0.0
    location: str | None = None
    required_skills: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    client_name: str
    description: str
    status: str
    start_date: datetime
    deadline: datetime
    budget: float
    location: str | None
    required_skills: list[str]
    tags: list[str]
    roadmap: list[RoadmapPhase]
    edit_history: list[EditHistoryEntry]
    roadmap_version: int
    created_at: datetime
    updated_at: datetime
