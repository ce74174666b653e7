"""Shared enums and types for the goal lifecycle engine."""

from enum import StrEnum


class GoalStatus(StrEnum):
    YET_TO_START = "yet-to-start"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    PENDING_REVIEW = "pending-review"
    ACHIEVED = "achieved"
    CANCELLED = "cancelled"


class GoalPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MilestoneStatus(StrEnum):
    INCOMPLETE = "incomplete"
    PARTIAL = "partial"
    COMPLETED = "completed"


class ContributionType(StrEnum):
    MILESTONE = "milestone"
    PROGRESS = "progress"
    BLOCKER = "blocker"
    UPDATE = "update"


class ErrorKind(StrEnum):
    NETWORK = "network"
    PERMISSION = "permission"
    VALIDATION = "validation"
    UNKNOWN = "unknown"
