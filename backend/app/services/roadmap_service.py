"""Roadmap editing, regeneration and progress tracking."""

from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.agent.roadmap_generator import RoadmapGenerationRequest, RoadmapGenerator
from app.core.config import get_settings
from app.core.errors import InvalidFieldValueError
from app.core.logging import get_logger
from app.models.project import Project
from app.schemas.roadmap import (
    EditHistoryEntry,
    FieldChange,
    Milestone,
    MilestoneEdit,
    MilestoneStatus,
    PhaseProgress,
    RoadmapDocument,
    RoadmapProgress,
)
from app.services import project_service
from app.services.id_allocator import IdAllocator

logger = get_logger(__name__)

EDITABLE_FIELDS = ("name", "description", "status")
ROADMAP_UPDATED = "Updated the project roadmap"
MILESTONE_ADDED = "Added a milestone to the project roadmap"


@dataclass(frozen=True)
class RoadmapEdit:
    """A new roadmap together with the history entry describing the save."""

    roadmap: RoadmapDocument
    entry: EditHistoryEntry


def _now() -> datetime:
    return datetime.now(UTC)


# ============================================================================
# Pure transforms
# ============================================================================


def _checked_value(field: str, value: str) -> str | MilestoneStatus:
    if field not in EDITABLE_FIELDS:
        raise InvalidFieldValueError(
            f"'{field}' is not an editable milestone field", operation="save"
        )
    if field == "status":
        try:
            return MilestoneStatus(value)
        except ValueError:
            allowed = ", ".join(s.value for s in MilestoneStatus)
            raise InvalidFieldValueError(
                f"'{value}' is not a milestone status (expected one of: {allowed})",
                operation="save",
            ) from None
    if not value.strip():
        raise InvalidFieldValueError(f"milestone {field} must not be blank", operation="save")
    return value


def apply_milestone_edits(
    roadmap: RoadmapDocument,
    edits: list[MilestoneEdit],
    *,
    editor: str,
    timestamp: datetime | None = None,
) -> RoadmapEdit:
    """Apply a batch of milestone field edits as one save.

    Every edit is resolved and validated before anything changes, and the
    edits are applied to a copy, so ``roadmap`` itself is never mutated.
    Exactly one history entry is produced however many edits the batch
    holds.

    Raises:
        NotFoundError: if an edit's phase or milestone does not resolve.
        InvalidFieldValueError: for an unknown field, a blank name or
            description, or a status outside the enumeration.
    """
    resolved = []
    for edit in edits:
        value = _checked_value(edit.field, edit.value)
        position = roadmap.locate(edit.phase_ref, edit.milestone_ref)
        resolved.append((position, edit.field, value))

    updated = roadmap.model_copy(deep=True)
    changes = []
    for (phase_index, milestone_index), field, value in resolved:
        phase = updated.phases[phase_index]
        milestone = phase.milestones[milestone_index]
        old_value = getattr(milestone, field)
        setattr(milestone, field, value)
        changes.append(
            FieldChange(
                phase_id=phase.id,
                milestone_id=milestone.id,
                field=field,
                old_value=_as_text(old_value),
                new_value=_as_text(value),
            )
        )

    entry = EditHistoryEntry(
        timestamp=timestamp or _now(),
        editor=editor,
        change=ROADMAP_UPDATED,
        changes=tuple(changes),
    )
    return RoadmapEdit(roadmap=updated, entry=entry)


def _as_text(value: str | MilestoneStatus) -> str:
    return value.value if isinstance(value, MilestoneStatus) else value


def add_milestone(
    roadmap: RoadmapDocument,
    phase_id: str,
    *,
    name: str,
    description: str,
    editor: str,
    timestamp: datetime | None = None,
) -> RoadmapEdit:
    """Append a new ``Pending`` milestone to the end of a phase.

    The id continues the roadmap's milestone sequence and never reuses an
    id already present anywhere in the roadmap.
    """
    name = _checked_value("name", name)
    description = _checked_value("description", description)
    phase_index = roadmap.find_phase(phase_id)

    allocator = IdAllocator.continuing(roadmap.phase_ids(), roadmap.milestone_ids())
    milestone = Milestone(id=allocator.next_milestone_id(), name=name, description=description)

    updated = roadmap.model_copy(deep=True)
    updated.phases[phase_index].milestones.append(milestone)

    entry = EditHistoryEntry(
        timestamp=timestamp or _now(),
        editor=editor,
        change=MILESTONE_ADDED,
        changes=(
            FieldChange(
                phase_id=phase_id,
                milestone_id=milestone.id,
                field="name",
                new_value=milestone.name,
            ),
        ),
    )
    return RoadmapEdit(roadmap=updated, entry=entry)


def roadmap_progress(roadmap: RoadmapDocument) -> RoadmapProgress:
    """Completion ratios per phase and overall (completed / total milestones)."""
    status_counts = {status.value: 0 for status in MilestoneStatus}
    phases = []
    for phase in roadmap.phases:
        completed = 0
        for milestone in phase.milestones:
            status_counts[milestone.status.value] += 1
            if milestone.status is MilestoneStatus.COMPLETED:
                completed += 1
        total = len(phase.milestones)
        phases.append(
            PhaseProgress(
                phase_id=phase.id,
                name=phase.name,
                total=total,
                completed=completed,
                progress=completed / total if total else 0.0,
            )
        )

    total_milestones = sum(p.total for p in phases)
    total_completed = status_counts[MilestoneStatus.COMPLETED.value]
    return RoadmapProgress(
        overall_progress=total_completed / total_milestones if total_milestones else 0.0,
        total_milestones=total_milestones,
        status_counts=status_counts,
        phases=phases,
    )


def load_history(project: Project) -> list[EditHistoryEntry]:
    return [EditHistoryEntry.model_validate(item) for item in project.edit_history or []]


# ============================================================================
# Persistence orchestration
# ============================================================================


async def get_project_roadmap(db: AsyncSession, project_id: str) -> tuple[Project, RoadmapDocument]:
    project = await project_service.load_project(db, project_id)
    return project, RoadmapDocument.from_storage(project.roadmap)


async def generate_project_roadmap(
    db: AsyncSession,
    project_id: str,
    generator: RoadmapGenerator,
    *,
    persist: bool = True,
    expected_version: int | None = None,
) -> tuple[Project, RoadmapDocument]:
    """Generate a fresh roadmap for a project.

    When ``persist`` is set the new roadmap replaces the stored one
    entirely; the edit history is kept as it is. A failed generation
    leaves the stored roadmap untouched.
    """
    project = await project_service.load_project(db, project_id, operation="generation")
    try:
        request = RoadmapGenerationRequest(
            project_description=project.description,
            start_date=project.start_date,
            deadline=project.deadline,
        )
    except ValidationError as exc:
        raise InvalidFieldValueError(
            f"project cannot be planned: {exc.errors()[0]['msg']}", operation="generation"
        ) from exc
    roadmap = await generator.generate(request)

    if persist:
        project = await project_service.save_project(
            db,
            project_id,
            roadmap=roadmap.to_storage(),
            expected_version=expected_version,
        )
        logger.info(
            "Roadmap replaced",
            project_id=project_id,
            phases=len(roadmap.phases),
            version=project.roadmap_version,
        )
    return project, roadmap


async def _save_edit(
    db: AsyncSession,
    project: Project,
    edit: RoadmapEdit,
    expected_version: int | None,
) -> Project:
    history = list(project.edit_history or [])
    history.append(edit.entry.model_dump(mode="json"))
    return await project_service.save_project(
        db,
        project.id,
        roadmap=edit.roadmap.to_storage(),
        edit_history=history,
        expected_version=expected_version,
    )


async def save_roadmap_edits(
    db: AsyncSession,
    project_id: str,
    edits: list[MilestoneEdit],
    *,
    editor: str | None = None,
    expected_version: int | None = None,
) -> Project:
    """Validate, apply and persist a batch of milestone edits.

    Note: This function commits the transaction.
    """
    project = await project_service.load_project(db, project_id, operation="save")
    roadmap = RoadmapDocument.from_storage(project.roadmap)
    edit = apply_milestone_edits(
        roadmap,
        edits,
        editor=editor or get_settings().DEFAULT_EDITOR_NAME,
    )
    project = await _save_edit(db, project, edit, expected_version)

    logger.info(
        "Roadmap edits saved",
        project_id=project_id,
        edits=len(edits),
        history_length=len(project.edit_history),
    )
    return project


async def add_project_milestone(
    db: AsyncSession,
    project_id: str,
    phase_id: str,
    *,
    name: str,
    description: str,
    editor: str | None = None,
    expected_version: int | None = None,
) -> tuple[Project, Milestone]:
    """Note: This function commits the transaction."""
    project = await project_service.load_project(db, project_id, operation="save")
    roadmap = RoadmapDocument.from_storage(project.roadmap)
    edit = add_milestone(
        roadmap,
        phase_id,
        name=name,
        description=description,
        editor=editor or get_settings().DEFAULT_EDITOR_NAME,
    )
    project = await _save_edit(db, project, edit, expected_version)

    phase = edit.roadmap.phases[edit.roadmap.find_phase(phase_id)]
    milestone = phase.milestones[-1]
    logger.info("Milestone added", project_id=project_id, phase_id=phase_id, milestone_id=milestone.id)
    return project, milestone


async def get_roadmap_progress(db: AsyncSession, project_id: str) -> RoadmapProgress:
    _, roadmap = await get_project_roadmap(db, project_id)
    return roadmap_progress(roadmap)
