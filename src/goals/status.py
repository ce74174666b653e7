"""Goal status vocabulary migration and the status transition table.

Stored goals may carry status strings from older vocabularies. Every read
goes through ``migrate_status`` so old data is normalized without a backfill.
"""

from typing import Any

from shared_types import GoalStatus

from .errors import InvalidTransitionError

DEFAULT_STATUS = GoalStatus.YET_TO_START

_CANONICAL = frozenset(s.value for s in GoalStatus)

_LEGACY_STATUSES: dict[str, GoalStatus] = {
    # yet-to-start
    "not-started": GoalStatus.YET_TO_START,
    "notstarted": GoalStatus.YET_TO_START,
    "todo": GoalStatus.YET_TO_START,
    "new": GoalStatus.YET_TO_START,
    "open": GoalStatus.YET_TO_START,
    "planned": GoalStatus.YET_TO_START,
    "draft": GoalStatus.YET_TO_START,
    # in-progress
    "active": GoalStatus.IN_PROGRESS,
    "started": GoalStatus.IN_PROGRESS,
    "ongoing": GoalStatus.IN_PROGRESS,
    "inprogress": GoalStatus.IN_PROGRESS,
    # blocked
    "on-hold": GoalStatus.BLOCKED,
    "paused": GoalStatus.BLOCKED,
    "stalled": GoalStatus.BLOCKED,
    "stuck": GoalStatus.BLOCKED,
    # pending-review
    "review": GoalStatus.PENDING_REVIEW,
    "in-review": GoalStatus.PENDING_REVIEW,
    "pending": GoalStatus.PENDING_REVIEW,
    "awaiting-review": GoalStatus.PENDING_REVIEW,
    # achieved
    "completed": GoalStatus.ACHIEVED,
    "complete": GoalStatus.ACHIEVED,
    "done": GoalStatus.ACHIEVED,
    "finished": GoalStatus.ACHIEVED,
    # cancelled
    "canceled": GoalStatus.CANCELLED,
    "abandoned": GoalStatus.CANCELLED,
    "dropped": GoalStatus.CANCELLED,
    "archived": GoalStatus.CANCELLED,
}

TRANSITIONS: dict[GoalStatus, frozenset[GoalStatus]] = {
    GoalStatus.YET_TO_START: frozenset({GoalStatus.IN_PROGRESS, GoalStatus.CANCELLED}),
    GoalStatus.IN_PROGRESS: frozenset({
        GoalStatus.BLOCKED,
        GoalStatus.PENDING_REVIEW,
        GoalStatus.ACHIEVED,
        GoalStatus.CANCELLED,
    }),
    GoalStatus.BLOCKED: frozenset({GoalStatus.IN_PROGRESS, GoalStatus.CANCELLED}),
    GoalStatus.PENDING_REVIEW: frozenset({
        GoalStatus.IN_PROGRESS,
        GoalStatus.ACHIEVED,
        GoalStatus.CANCELLED,
    }),
    # Achieved and cancelled goals can be reopened
    GoalStatus.ACHIEVED: frozenset({GoalStatus.IN_PROGRESS}),
    GoalStatus.CANCELLED: frozenset({GoalStatus.IN_PROGRESS}),
}

# Display order for menus
_ORDER = list(GoalStatus)


def _normalize(raw: str) -> str:
    return raw.strip().lower().replace("_", "-").replace(" ", "-")


def is_valid_status(raw: Any) -> bool:
    """True if ``raw`` is already one of the canonical status values."""
    return isinstance(raw, str) and raw in _CANONICAL


def migrate_status(raw: Any) -> GoalStatus:
    """Map any stored status string onto the canonical vocabulary.

    Total and idempotent: canonical values map to themselves and anything
    unrecognized (including None) maps to ``yet-to-start``.
    """
    if isinstance(raw, GoalStatus):
        return raw
    if not isinstance(raw, str):
        return DEFAULT_STATUS

    key = _normalize(raw)
    if key in _CANONICAL:
        return GoalStatus(key)
    return _LEGACY_STATUSES.get(key, DEFAULT_STATUS)


def valid_transitions(status: Any) -> frozenset[GoalStatus]:
    """Statuses reachable in one step from ``status`` (legacy values allowed)."""
    return TRANSITIONS[migrate_status(status)]


def ordered_transitions(status: Any) -> list[GoalStatus]:
    """Same as valid_transitions, in stable display order."""
    allowed = valid_transitions(status)
    return [s for s in _ORDER if s in allowed]


def is_known_status(raw: Any) -> bool:
    """True if ``raw`` is canonical or a recognized legacy spelling."""
    if isinstance(raw, GoalStatus):
        return True
    if not isinstance(raw, str):
        return False
    key = _normalize(raw)
    return key in _CANONICAL or key in _LEGACY_STATUSES


def can_transition(current: Any, target: Any) -> bool:
    # Unknown targets would silently migrate to the default, so reject them
    if not is_known_status(target):
        return False
    return migrate_status(target) in valid_transitions(current)


def ensure_transition(current: Any, target: Any) -> GoalStatus:
    """Return the canonical target or raise InvalidTransitionError."""
    if not can_transition(current, target):
        raise InvalidTransitionError(str(migrate_status(current)), str(target))
    return migrate_status(target)
