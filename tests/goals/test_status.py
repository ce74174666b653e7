"""Tests for status vocabulary migration and the transition table."""

import pytest

from goals.errors import InvalidTransitionError
from goals.status import (
    can_transition,
    ensure_transition,
    is_known_status,
    is_valid_status,
    migrate_status,
    ordered_transitions,
    valid_transitions,
)
from shared_types import GoalStatus


class TestMigrateStatus:
    @pytest.mark.parametrize("status", list(GoalStatus))
    def test_canonical_is_identity(self, status):
        assert migrate_status(status.value) == status
        assert migrate_status(status) == status

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("not-started", GoalStatus.YET_TO_START),
            ("completed", GoalStatus.ACHIEVED),
            ("Completed", GoalStatus.ACHIEVED),
            ("  done ", GoalStatus.ACHIEVED),
            ("in_progress", GoalStatus.IN_PROGRESS),
            ("In Progress", GoalStatus.IN_PROGRESS),
            ("on-hold", GoalStatus.BLOCKED),
            ("review", GoalStatus.PENDING_REVIEW),
            ("canceled", GoalStatus.CANCELLED),
            ("abandoned", GoalStatus.CANCELLED),
        ],
    )
    def test_legacy_values(self, raw, expected):
        assert migrate_status(raw) == expected

    @pytest.mark.parametrize("raw", ["", "???", "archived-ish", None, 42, ["achieved"]])
    def test_total_with_default(self, raw):
        """Anything unrecognized lands on yet-to-start."""
        result = migrate_status(raw)
        assert result in set(GoalStatus)
        assert result == GoalStatus.YET_TO_START

    def test_migration_is_idempotent(self):
        for raw in ["completed", "paused", "garbage", "pending-review"]:
            once = migrate_status(raw)
            assert migrate_status(once) == once

    def test_is_valid_status(self):
        assert is_valid_status("achieved")
        assert not is_valid_status("completed")
        assert not is_valid_status("Achieved")
        assert not is_valid_status(None)

    def test_is_known_status(self):
        assert is_known_status("completed")
        assert is_known_status(GoalStatus.BLOCKED)
        assert not is_known_status("garbage")


class TestTransitions:
    def test_table(self):
        assert valid_transitions(GoalStatus.YET_TO_START) == {
            GoalStatus.IN_PROGRESS,
            GoalStatus.CANCELLED,
        }
        assert valid_transitions(GoalStatus.IN_PROGRESS) == {
            GoalStatus.BLOCKED,
            GoalStatus.PENDING_REVIEW,
            GoalStatus.ACHIEVED,
            GoalStatus.CANCELLED,
        }
        assert valid_transitions(GoalStatus.BLOCKED) == {GoalStatus.IN_PROGRESS, GoalStatus.CANCELLED}
        assert valid_transitions(GoalStatus.PENDING_REVIEW) == {
            GoalStatus.IN_PROGRESS,
            GoalStatus.ACHIEVED,
            GoalStatus.CANCELLED,
        }

    @pytest.mark.parametrize("status", list(GoalStatus))
    def test_no_self_loops(self, status):
        assert status not in valid_transitions(status)

    def test_achieved_and_cancelled_reopen(self):
        assert valid_transitions(GoalStatus.ACHIEVED) == {GoalStatus.IN_PROGRESS}
        assert valid_transitions(GoalStatus.CANCELLED) == {GoalStatus.IN_PROGRESS}

    def test_legacy_current_status(self):
        """A goal stored as 'completed' offers only reopening."""
        assert valid_transitions("completed") == {GoalStatus.IN_PROGRESS}
        assert valid_transitions("not-started") == valid_transitions(GoalStatus.YET_TO_START)

    def test_ordered_transitions_stable(self):
        assert ordered_transitions("in-progress") == [
            GoalStatus.BLOCKED,
            GoalStatus.PENDING_REVIEW,
            GoalStatus.ACHIEVED,
            GoalStatus.CANCELLED,
        ]

    def test_can_transition(self):
        assert can_transition("in-progress", "blocked")
        assert can_transition("in-progress", "completed")
        assert not can_transition("yet-to-start", "achieved")
        assert not can_transition("in-progress", "in-progress")
        # Unknown targets are rejected rather than read as yet-to-start
        assert not can_transition("blocked", "nonsense")

    def test_ensure_transition(self):
        assert ensure_transition("in-progress", "done") == GoalStatus.ACHIEVED
        with pytest.raises(InvalidTransitionError) as exc:
            ensure_transition("achieved", "blocked")
        assert exc.value.current == "achieved"
        assert exc.value.target == "blocked"
