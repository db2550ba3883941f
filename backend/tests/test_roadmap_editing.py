"""Tests for milestone editing, milestone addition and progress."""

from datetime import UTC, datetime

import pytest

from app.core.errors import InvalidFieldValueError, NotFoundError
from app.schemas.roadmap import MilestoneEdit, MilestoneStatus, RoadmapDocument
from app.services.roadmap_service import (
    MILESTONE_ADDED,
    ROADMAP_UPDATED,
    add_milestone,
    apply_milestone_edits,
    roadmap_progress,
)

STAMP = datetime(2026, 4, 2, 9, 30, tzinfo=UTC)


def _edit(phase, milestone, field, value) -> MilestoneEdit:
    data = {"field": field, "value": value}
    data["phase_index" if isinstance(phase, int) else "phase_id"] = phase
    data["milestone_index" if isinstance(milestone, int) else "milestone_id"] = milestone
    return MilestoneEdit(**data)


class TestApplyMilestoneEdits:
    def test_single_status_edit(self, sample_roadmap):
        result = apply_milestone_edits(
            sample_roadmap,
            [_edit("p1", "m1", "status", "Completed")],
            editor="Priya",
            timestamp=STAMP,
        )

        assert result.roadmap.phases[0].milestones[0].status is MilestoneStatus.COMPLETED
        assert result.entry.editor == "Priya"
        assert result.entry.change == ROADMAP_UPDATED
        assert result.entry.timestamp == STAMP

    def test_input_roadmap_is_not_mutated(self, sample_roadmap):
        before = sample_roadmap.model_dump()
        apply_milestone_edits(sample_roadmap, [_edit("p2", "m4", "name", "Steel framing")], editor="x")
        assert sample_roadmap.model_dump() == before

    def test_batch_produces_one_entry_with_diff(self, sample_roadmap):
        result = apply_milestone_edits(
            sample_roadmap,
            [
                _edit("p1", "m1", "status", "In Progress"),
                _edit(1, 0, "description", "Pour and cure the slab"),
                _edit("p3", 0, "name", "City sign-off"),
            ],
            editor="Priya",
        )

        assert [(c.milestone_id, c.field) for c in result.entry.changes] == [
            ("m1", "status"),
            ("m3", "description"),
            ("m5", "name"),
        ]
        first = result.entry.changes[0]
        assert (first.old_value, first.new_value) == ("Pending", "In Progress")
        assert result.roadmap.phases[2].milestones[0].name == "City sign-off"

    def test_order_and_ids_preserved(self, sample_roadmap):
        result = apply_milestone_edits(
            sample_roadmap, [_edit("p2", "m3", "name", "Slab")], editor="x"
        )
        assert result.roadmap.phase_ids() == sample_roadmap.phase_ids()
        assert result.roadmap.milestone_ids() == sample_roadmap.milestone_ids()

    def test_empty_batch_still_records_the_save(self, sample_roadmap):
        result = apply_milestone_edits(sample_roadmap, [], editor="x")
        assert result.roadmap == sample_roadmap
        assert result.entry.changes == ()

    def test_invalid_status_changes_nothing(self, sample_roadmap):
        before = sample_roadmap.to_storage()
        with pytest.raises(InvalidFieldValueError, match="'Archived' is not a milestone status"):
            apply_milestone_edits(
                sample_roadmap,
                [
                    _edit("p1", "m1", "name", "Renamed first"),
                    _edit("p1", "m2", "status", "Archived"),
                ],
                editor="x",
            )
        assert sample_roadmap.to_storage() == before

    @pytest.mark.parametrize("status", ["pending", "InProgress", "Done", ""])
    def test_only_enumerated_statuses_accepted(self, sample_roadmap, status):
        with pytest.raises(InvalidFieldValueError):
            apply_milestone_edits(sample_roadmap, [_edit("p1", "m1", "status", status)], editor="x")

    def test_unknown_field_rejected(self, sample_roadmap):
        with pytest.raises(InvalidFieldValueError, match="'id' is not an editable"):
            apply_milestone_edits(sample_roadmap, [_edit("p1", "m1", "id", "m99")], editor="x")

    def test_blank_name_rejected(self, sample_roadmap):
        with pytest.raises(InvalidFieldValueError):
            apply_milestone_edits(sample_roadmap, [_edit("p1", "m1", "name", "  ")], editor="x")

    def test_unresolved_target_rejected(self, sample_roadmap):
        before = sample_roadmap.to_storage()
        with pytest.raises(NotFoundError):
            apply_milestone_edits(
                sample_roadmap,
                [_edit("p1", "m1", "name", "ok"), _edit("p1", "m5", "name", "wrong phase")],
                editor="x",
            )
        assert sample_roadmap.to_storage() == before


class TestAddMilestone:
    def test_continues_milestone_sequence(self, sample_roadmap):
        result = add_milestone(
            sample_roadmap,
            "p1",
            name="Soil test",
            description="Geotechnical report",
            editor="Priya",
        )

        added = result.roadmap.phases[0].milestones[-1]
        assert added.id == "m6"
        assert added.status is MilestoneStatus.PENDING
        assert result.entry.change == MILESTONE_ADDED
        assert len(sample_roadmap.phases[0].milestones) == 2

    def test_unknown_phase(self, sample_roadmap):
        with pytest.raises(NotFoundError):
            add_milestone(sample_roadmap, "p7", name="n", description="d", editor="x")

    def test_blank_description(self, sample_roadmap):
        with pytest.raises(InvalidFieldValueError):
            add_milestone(sample_roadmap, "p1", name="n", description="", editor="x")


class TestProgress:
    def test_empty_roadmap(self):
        progress = roadmap_progress(RoadmapDocument())
        assert progress.overall_progress == 0.0
        assert progress.total_milestones == 0
        assert progress.phases == []

    def test_counts_completed_milestones(self, sample_roadmap):
        result = apply_milestone_edits(
            sample_roadmap,
            [
                _edit("p1", "m1", "status", "Completed"),
                _edit("p1", "m2", "status", "Completed"),
                _edit("p2", "m3", "status", "In Progress"),
            ],
            editor="x",
        )
        progress = roadmap_progress(result.roadmap)

        assert progress.total_milestones == 5
        assert progress.overall_progress == pytest.approx(0.4)
        assert progress.status_counts == {"Pending": 2, "In Progress": 1, "Completed": 2}
        assert [p.progress for p in progress.phases] == [1.0, 0.0, 0.0]
