"""Completion trigger: decide when to ask before marking a goal achieved.

The check runs against a simulated next state, i.e. the goal as it would look
after a pending mutation. The simulation is a copy. The live goal is never
touched until the user confirms and the commit succeeds, so cancelling or
failing leaves nothing behind.
"""

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Mapping, Optional

import structlog

from shared_types import ErrorKind, GoalStatus

from .errors import CompletionStateError
from .models import Goal
from .progress import MILESTONE_CAP, needs_completion, refresh_cached_progress

logger = structlog.get_logger()


@dataclass(frozen=True)
class PendingMutation:
    """A not-yet-persisted change to a goal.

    ``changes`` maps Goal attribute names to their new values.
    """

    goal_id: str
    changes: Mapping[str, Any] = field(default_factory=dict)
    label: str = ""

    def apply(self, goal: Goal, cap: int = MILESTONE_CAP) -> Goal:
        """Simulated next state. Returns a new Goal; ``goal`` is unchanged."""
        simulated = replace(goal, **dict(self.changes))
        return refresh_cached_progress(simulated, cap)


def should_show_completion_dialog(goal: Goal, cap: int = MILESTONE_CAP) -> bool:
    """True when progress has reached 100 and the goal is not yet achieved.

    Pass the simulated next state, not the persisted goal.
    """
    return needs_completion(goal, cap)


def requires_completion(goal: Goal, mutation: PendingMutation, cap: int = MILESTONE_CAP) -> bool:
    return should_show_completion_dialog(mutation.apply(goal, cap), cap)


class CompletionPhase(StrEnum):
    PROMPTING = "prompting"
    CONFIRMING = "confirming"
    COMMITTED = "committed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class CompletionFlow:
    """One open "mark goal complete?" confirmation.

    Holds the goal as it was before the mutation and the pending mutation.
    ``goal`` is what should be displayed: the original until a commit
    succeeds, the committed goal afterwards.
    """

    def __init__(self, original: Goal, mutation: PendingMutation, cap: int = MILESTONE_CAP):
        self.original = original
        self.mutation = mutation
        self._cap = cap
        self.phase = CompletionPhase.PROMPTING
        self.committed: Optional[Goal] = None
        self.error_kind: Optional[ErrorKind] = None
        self.message: Optional[str] = None

    @property
    def simulated(self) -> Goal:
        return self.mutation.apply(self.original, self._cap)

    @property
    def goal(self) -> Goal:
        return self.committed if self.committed is not None else self.original

    @property
    def is_open(self) -> bool:
        return self.phase in (CompletionPhase.PROMPTING, CompletionPhase.FAILED)

    def completion_changes(self, notes: Optional[str]) -> dict:
        """Pending changes plus achieved status and notes, as one change set."""
        cleaned = notes.strip() if notes else None
        return {
            **dict(self.mutation.changes),
            "status": GoalStatus.ACHIEVED,
            "completion_notes": cleaned or None,
        }

    def begin_confirm(self) -> None:
        if not self.is_open:
            raise CompletionStateError(f"Completion for goal {self.original.id} is {self.phase}")
        self.phase = CompletionPhase.CONFIRMING
        self.error_kind = None
        self.message = None

    def mark_committed(self, goal: Goal) -> None:
        self.phase = CompletionPhase.COMMITTED
        self.committed = goal

    def mark_failed(self, kind: ErrorKind, message: str) -> None:
        # Nothing was applied locally, so the original stays on display
        self.phase = CompletionPhase.FAILED
        self.error_kind = kind
        self.message = message

    def cancel(self) -> Goal:
        """Discard the pending mutation and return the untouched original."""
        if not self.is_open:
            raise CompletionStateError(f"Completion for goal {self.original.id} is {self.phase}")
        self.phase = CompletionPhase.CANCELLED
        logger.info("completion_cancelled", goal_id=self.original.id, label=self.mutation.label)
        return self.original
