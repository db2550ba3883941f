"""Pydantic schemas."""

from app.schemas.contractor import (
    ContractorCreate,
    ContractorProfile,
    MatchRequirement,
    MatchResponse,
)
from app.schemas.project import ProjectCreate, ProjectResponse
from app.schemas.roadmap import (
    EditHistoryEntry,
    FieldChange,
    Milestone,
    MilestoneCreate,
    MilestoneEdit,
    MilestoneStatus,
    RoadmapDocument,
    RoadmapEditRequest,
    RoadmapPhase,
    RoadmapProgress,
    RoadmapResponse,
)

__all__ = [
    "ContractorCreate",
    "ContractorProfile",
    "MatchRequirement",
    "MatchResponse",
    "ProjectCreate",
    "ProjectResponse",
    "EditHistoryEntry",
    "FieldChange",
    "Milestone",
    "MilestoneCreate",
    "MilestoneEdit",
    "MilestoneStatus",
    "RoadmapDocument",
    "RoadmapEditRequest",
    "RoadmapPhase",
    "RoadmapProgress",
    "RoadmapResponse",
]
