"""UI-side state machine for a single goal status change.

Kept separate from the goal's own status::

    IDLE --submit--> UPDATING --ok--> IDLE
                              \\-err--> FAILED --retry--> UPDATING

A failed attempt keeps its target so retry re-submits it without a new
selection. The error is classified only to pick a message; every kind is
retried the same way.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Awaitable, Callable, Optional

import structlog

from observability import metrics
from shared_types import ErrorKind, GoalStatus

from .models import Goal
from .status import ensure_transition, migrate_status, ordered_transitions

logger = structlog.get_logger()

DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "Network error - check your connection",
    ErrorKind.PERMISSION: "You don't have permission to change this status",
    ErrorKind.VALIDATION: "Invalid status change",
    ErrorKind.UNKNOWN: "Failed to update status",
}

_ERROR_MARKERS: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.NETWORK, ("network", "fetch")),
    (ErrorKind.PERMISSION, ("permission", "forbidden")),
    (ErrorKind.VALIDATION, ("validation", "invalid")),
)

StatusChangeHandler = Callable[[str, GoalStatus], Awaitable[Any]]


def classify_error(error: BaseException) -> ErrorKind:
    """Bucket an error by substrings of its message."""
    text = str(error).lower()
    for kind, markers in _ERROR_MARKERS:
        if any(marker in text for marker in markers):
            return kind
    return ErrorKind.UNKNOWN


def friendly_message(
    kind: ErrorKind,
    error: Optional[BaseException] = None,
    messages: Optional[dict[ErrorKind, str]] = None,
) -> str:
    """User-facing text for a classified error.

    Unclassified errors show their own message when they have one.
    """
    table = {**DEFAULT_MESSAGES, **(messages or {})}
    if kind == ErrorKind.UNKNOWN and error is not None and str(error):
        return str(error)
    return table[kind]


class WorkflowPhase(StrEnum):
    IDLE = "idle"
    UPDATING = "updating"
    FAILED = "failed"


@dataclass(frozen=True)
class WorkflowState:
    phase: WorkflowPhase = WorkflowPhase.IDLE
    target: Optional[GoalStatus] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def is_failed(self) -> bool:
        return self.phase == WorkflowPhase.FAILED

    @property
    def is_updating(self) -> bool:
        return self.phase == WorkflowPhase.UPDATING


class StatusWorkflow:
    """Drives status changes for one goal through a persistence callback.

    Args:
        goal: Goal as currently observed
        on_status_change: Async callable ``(goal_id, target)``; may return the
            updated Goal. Any exception it raises becomes FAILED state.
        disabled: Externally disabled workflows ignore submissions
        messages: Overrides for the per-kind user-facing messages
    """

    def __init__(
        self,
        goal: Goal,
        on_status_change: StatusChangeHandler,
        disabled: bool = False,
        messages: Optional[dict[ErrorKind, str]] = None,
    ):
        self._goal = goal
        self._observed_status = goal.canonical_status
        self._on_status_change = on_status_change
        self._messages = messages
        self._state = WorkflowState()
        self.disabled = disabled

    @property
    def goal(self) -> Goal:
        return self._goal

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def current_status(self) -> GoalStatus:
        return migrate_status(self._goal.status)

    @property
    def available_transitions(self) -> list[GoalStatus]:
        """Exactly the transition-table entries for the current status."""
        return ordered_transitions(self._goal.status)

    @property
    def has_transitions(self) -> bool:
        return bool(self.available_transitions)

    @property
    def can_submit(self) -> bool:
        return not self.disabled and not self._state.is_updating

    @property
    def retry_target(self) -> Optional[GoalStatus]:
        return self._state.target if self._state.is_failed else None

    async def transition_to(self, target: GoalStatus | str) -> bool:
        """Submit a status change. Returns True when it was committed.

        No-op (False) while an update is in flight or the workflow is
        disabled. Raises InvalidTransitionError for targets the table forbids.
        """
        if not self.can_submit:
            logger.debug("status_change_ignored", goal_id=self._goal.id, phase=str(self._state.phase))
            return False

        canonical = ensure_transition(self._goal.status, target)
        self._state = WorkflowState(phase=WorkflowPhase.UPDATING, target=canonical)

        try:
            result = await self._on_status_change(self._goal.id, canonical)
        except Exception as e:
            kind = classify_error(e)
            self._state = WorkflowState(
                phase=WorkflowPhase.FAILED,
                target=canonical,
                error_kind=kind,
                message=friendly_message(kind, e, self._messages),
            )
            metrics.counter("workflow.failed")
            logger.warning(
                "status_change_failed",
                goal_id=self._goal.id,
                target=str(canonical),
                kind=str(kind),
                error=str(e),
            )
            return False

        self._state = WorkflowState()
        metrics.counter("workflow.committed")
        if isinstance(result, Goal):
            self.observe(result)
        return True

    async def retry(self) -> bool:
        """Re-submit the last failed target."""
        target = self.retry_target
        if target is None:
            return False
        metrics.counter("workflow.retried")
        return await self.transition_to(target)

    def observe(self, goal: Goal) -> None:
        """Feed in the latest goal data.

        A failure is cleared once the goal's status changes underneath it,
        e.g. when another actor already moved it on.
        """
        previous = self._observed_status
        self._goal = goal
        self._observed_status = goal.canonical_status
        # Any change clears, including a move to the failed target itself:
        # retrying that target would then be a self-transition
        if self._state.is_failed and self._observed_status != previous:
            logger.debug(
                "status_failure_cleared",
                goal_id=goal.id,
                failed_target=str(self._state.target),
                observed=str(self._observed_status),
            )
            self._state = WorkflowState()
