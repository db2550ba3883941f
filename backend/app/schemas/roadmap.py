"""Roadmap document model plus the request/response schemas built on it."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from app.core.errors import NotFoundError

Identifier = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MilestoneStatus(str, Enum):
    """Milestone lifecycle. These three strings are the only accepted values."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class Milestone(BaseModel):
    """A trackable unit of work inside a phase."""

    id: Identifier
    name: str
    description: str
    status: MilestoneStatus = MilestoneStatus.PENDING


class RoadmapPhase(BaseModel):
    """An ordered stage of the roadmap."""

    id: Identifier
    name: str
    description: str
    milestones: list[Milestone] = Field(default_factory=list)


def _ensure_unique(kind: str, ids: list[str]) -> None:
    seen: set[str] = set()
    duplicates = []
    for item in ids:
        if item in seen:
            duplicates.append(item)
        seen.add(item)
    if duplicates:
        raise ValueError(f"duplicate {kind} ids: {', '.join(sorted(set(duplicates)))}")


class RoadmapDocument(BaseModel):
    """Ordered phases of one project's roadmap.

    Phase ids are unique across the document, and milestone ids are unique
    across *all* phases (not just within their own phase). An empty
    document means the project has no roadmap yet.
    """

    phases: list[RoadmapPhase] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "RoadmapDocument":
        _ensure_unique("phase", self.phase_ids())
        _ensure_unique("milestone", self.milestone_ids())
        return self

    @classmethod
    def from_storage(cls, phases: list[dict[str, Any]] | None) -> "RoadmapDocument":
        """Build from the JSON array stored on the project row."""
        return cls.model_validate({"phases": phases or []})

    def to_storage(self) -> list[dict[str, Any]]:
        return [phase.model_dump(mode="json") for phase in self.phases]

    @property
    def is_empty(self) -> bool:
        return not self.phases

    def phase_ids(self) -> list[str]:
        return [phase.id for phase in self.phases]

    def milestone_ids(self) -> list[str]:
        return [m.id for phase in self.phases for m in phase.milestones]

    def iter_milestones(self):
        for phase in self.phases:
            for milestone in phase.milestones:
                yield phase, milestone

    def find_phase(self, ref: str | int, *, operation: str = "save") -> int:
        """Resolve a phase id or 0-based index to its position."""
        if isinstance(ref, int):
            if 0 <= ref < len(self.phases):
                return ref
            raise NotFoundError(f"phase index {ref} is out of range", operation=operation)
        for index, phase in enumerate(self.phases):
            if phase.id == ref:
                return index
        raise NotFoundError(f"phase '{ref}' not found", operation=operation)

    def locate(
        self,
        phase_ref: str | int,
        milestone_ref: str | int,
        *,
        operation: str = "save",
    ) -> tuple[int, int]:
        """Resolve a (phase, milestone) reference pair to positions.

        Ids and indices may be mixed; a milestone id must belong to the
        resolved phase.
        """
        phase_index = self.find_phase(phase_ref, operation=operation)
        milestones = self.phases[phase_index].milestones
        phase_id = self.phases[phase_index].id
        if isinstance(milestone_ref, int):
            if 0 <= milestone_ref < len(milestones):
                return phase_index, milestone_ref
            raise NotFoundError(
                f"milestone index {milestone_ref} is out of range in phase '{phase_id}'",
                operation=operation,
            )
        for index, milestone in enumerate(milestones):
            if milestone.id == milestone_ref:
                return phase_index, index
        raise NotFoundError(
            f"milestone '{milestone_ref}' not found in phase '{phase_id}'",
            operation=operation,
        )


# ============================================================================
# Edit history
# ============================================================================


class FieldChange(BaseModel):
    """One field edit recorded inside a history entry."""

    model_config = ConfigDict(frozen=True)

    phase_id: str
    milestone_id: str
    field: str
    old_value: str | None = None
    new_value: str


class EditHistoryEntry(BaseModel):
    """One entry per successful roadmap save. Entries are never modified."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    editor: str
    change: str
    changes: tuple[FieldChange, ...] = ()


# ============================================================================
# API schemas
# ============================================================================


class MilestoneEdit(BaseModel):
    """Set one field of one milestone.

    The phase is addressed by ``phase_id`` or ``phase_index`` and the
    milestone by ``milestone_id`` or ``milestone_index``.
    """

    phase_id: str | None = None
    phase_index: int | None = Field(default=None, ge=0)
    milestone_id: str | None = None
    milestone_index: int | None = Field(default=None, ge=0)
    field: str
    value: str

    @model_validator(mode="after")
    def _check_target(self) -> "MilestoneEdit":
        if (self.phase_id is None) == (self.phase_index is None):
            raise ValueError("exactly one of phase_id or phase_index is required")
        if (self.milestone_id is None) == (self.milestone_index is None):
            raise ValueError("exactly one of milestone_id or milestone_index is required")
        return self

    @property
    def phase_ref(self) -> str | int:
        return self.phase_id if self.phase_id is not None else self.phase_index  # type: ignore[return-value]

    @property
    def milestone_ref(self) -> str | int:
        if self.milestone_id is not None:
            return self.milestone_id
        return self.milestone_index  # type: ignore[return-value]


class RoadmapEditRequest(BaseModel):
    """A batch of milestone edits saved as one unit."""

    edits: list[MilestoneEdit] = Field(default_factory=list)
    editor: str | None = None
    expected_version: int | None = None


class MilestoneCreate(BaseModel):
    name: str
    description: str
    editor: str | None = None
    expected_version: int | None = None


class RoadmapResponse(BaseModel):
    """Roadmap state of a project."""

    project_id: str
    phases: list[RoadmapPhase]
    edit_history: list[EditHistoryEntry]
    roadmap_version: int


class PhaseProgress(BaseModel):
    phase_id: str
    name: str
    total: int
    completed: int
    progress: float  # 0.0 to 1.0


class RoadmapProgress(BaseModel):
    overall_progress: float  # 0.0 to 1.0
    total_milestones: int
    status_counts: dict[str, int]
    phases: list[PhaseProgress]
