"""Tests for task openness, counter contributions and field transitions."""

from datetime import datetime, timezone

import pytest

from task_ledger_mcp.domain.entities.task import UNSET, TaskDTO
from task_ledger_mcp.domain.lifecycle import (
    CounterDeltas,
    archive_changes,
    complete_changes,
    compute_counter_deltas,
    counter_contribution,
    is_open,
    move_target,
    unarchive_changes,
    uncomplete_changes,
    with_status_transition,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_task(**overrides) -> TaskDTO:
    values = {"id": "t1", "title": "Task", "project_id": "p1", "tag_ids": []}
    values.update(overrides)
    return TaskDTO(**values)


class TestIsOpen:
    def test_todo_task_is_open(self):
        assert is_open(make_task())

    @pytest.mark.parametrize(
        "overrides",
        [
            {"status": "DONE", "completed_at": NOW},
            {"archived_at": NOW},
            {"deleted_at": NOW},
        ],
    )
    def test_closed_states(self, overrides):
        assert not is_open(make_task(**overrides))

    def test_blocked_and_in_progress_are_open(self):
        assert is_open(make_task(status="BLOCKED"))
        assert is_open(make_task(status="IN_PROGRESS"))

    def test_missing_task_is_not_open(self):
        assert not is_open(None)


class TestCounterContribution:
    def test_live_open_task(self):
        contribution = counter_contribution(make_task(tag_ids=["a", "b"]))

        assert contribution.project_id == "p1"
        assert contribution.task_count == 1
        assert contribution.open_count == 1
        assert contribution.tag_ids == frozenset({"a", "b"})

    def test_done_task_counts_but_is_not_open(self):
        contribution = counter_contribution(make_task(status="DONE", completed_at=NOW))

        assert (contribution.task_count, contribution.open_count) == (1, 0)

    def test_deleted_task_contributes_nothing(self):
        contribution = counter_contribution(make_task(tag_ids=["a"], deleted_at=NOW))

        assert contribution.task_count == 0
        assert contribution.tag_ids == frozenset()

    def test_task_without_project_still_counts_for_tags(self):
        contribution = counter_contribution(make_task(project_id=None, tag_ids=["a"]))

        assert contribution.task_count == 0
        assert contribution.tag_ids == frozenset({"a"})


class TestComputeCounterDeltas:
    def test_creation(self):
        deltas = compute_counter_deltas(None, make_task(tag_ids=["a"]))

        assert deltas.to_dict() == {
            "projects": {"p1": {"task_count": 1, "open_count": 1}},
            "tags": {"a": 1},
        }

    def test_physical_delete_of_closed_task(self):
        deltas = compute_counter_deltas(make_task(status="DONE", completed_at=NOW), None)

        assert deltas.to_dict()["projects"] == {"p1": {"task_count": -1, "open_count": 0}}

    def test_completion_only_changes_open_count(self):
        before = make_task()
        after = make_task(status="DONE", completed_at=NOW)

        assert compute_counter_deltas(before, after).to_dict() == {
            "projects": {"p1": {"task_count": 0, "open_count": -1}},
            "tags": {},
        }

    def test_move_of_open_task(self):
        deltas = compute_counter_deltas(make_task(project_id="p1"), make_task(project_id="p2"))

        assert deltas.to_dict()["projects"] == {
            "p1": {"task_count": -1, "open_count": -1},
            "p2": {"task_count": 1, "open_count": 1},
        }

    def test_move_of_closed_task_leaves_open_counts(self):
        before = make_task(project_id="p1", archived_at=NOW)
        after = make_task(project_id="p2", archived_at=NOW)

        assert compute_counter_deltas(before, after).to_dict()["projects"] == {
            "p1": {"task_count": -1, "open_count": 0},
            "p2": {"task_count": 1, "open_count": 0},
        }

    def test_tag_set_difference(self):
        deltas = compute_counter_deltas(
            make_task(tag_ids=["a", "b"]), make_task(tag_ids=["b", "c"])
        )

        assert deltas.tags == {"a": -1, "c": 1}
        assert deltas.projects == {}

    def test_title_edit_is_empty(self):
        assert compute_counter_deltas(make_task(), make_task(title="Renamed")).is_empty()

    def test_restore_gives_contribution_back(self):
        deltas = compute_counter_deltas(
            make_task(tag_ids=["a"], deleted_at=NOW), make_task(tag_ids=["a"])
        )

        assert deltas.to_dict() == {
            "projects": {"p1": {"task_count": 1, "open_count": 1}},
            "tags": {"a": 1},
        }


class TestCounterDeltas:
    def test_merge_cancels_out(self):
        deltas = CounterDeltas()
        deltas.add_project("p1", 1, 1)
        deltas.add_tags(["a"], 1)

        other = CounterDeltas()
        other.add_project("p1", -1, -1)
        other.add_tags(["a"], -1)

        assert deltas.merge(other).is_empty()

    def test_missing_project_is_ignored(self):
        deltas = CounterDeltas()
        deltas.add_project(None, 1, 1)

        assert deltas.is_empty()


class TestStatusTransition:
    def test_done_stamps_completed_at(self):
        changes = with_status_transition(make_task(), {"status": "DONE"}, NOW)

        assert changes == {"status": "DONE", "completed_at": NOW}

    def test_leaving_done_clears_completed_at(self):
        current = make_task(status="DONE", completed_at=NOW)

        assert with_status_transition(current, {"status": "TODO"}, NOW)["completed_at"] is None

    def test_explicit_completed_at_wins(self):
        changes = with_status_transition(
            make_task(), {"status": "DONE", "completed_at": None}, NOW
        )

        assert changes["completed_at"] is None

    def test_no_status_change(self):
        assert with_status_transition(make_task(), {"title": "x"}, NOW) == {"title": "x"}


class TestChanges:
    def test_complete_is_idempotent(self):
        assert complete_changes(make_task(), NOW) == {"status": "DONE", "completed_at": NOW}
        assert complete_changes(make_task(status="DONE", completed_at=NOW), NOW) is None

    def test_uncomplete(self):
        assert uncomplete_changes(make_task()) is None
        assert uncomplete_changes(make_task(status="DONE", completed_at=NOW)) == {
            "status": "TODO",
            "completed_at": None,
        }

    def test_archive_pair(self):
        assert archive_changes(make_task(), NOW) == {"archived_at": NOW}
        assert archive_changes(make_task(archived_at=NOW), NOW) is None
        assert unarchive_changes(make_task()) is None
        assert unarchive_changes(make_task(archived_at=NOW)) == {"archived_at": None}


class TestMoveTarget:
    def test_unset_keeps_current(self):
        current = make_task(parent_id="t0", order=3)

        assert move_target(current, UNSET, UNSET, None) == ("p1", "t0", 3)

    def test_none_clears(self):
        current = make_task(parent_id="t0")

        assert move_target(current, None, None, 7) == (None, None, 7)

    def test_unset_is_falsy(self):
        assert not UNSET
        assert repr(UNSET) == "UNSET"
