"""Exceptions raised by the goal lifecycle core."""


class GoalError(Exception):
    """Base exception for goal lifecycle errors."""
    pass


class InvalidTransitionError(GoalError):
    """Raised when a status change is not in the transition table."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from {current} to {target}")


class DuplicateLinkError(GoalError):
    """Raised when a journal entry is linked to the same goal twice."""
    pass


class MilestoneNotFoundError(GoalError):
    """Raised when a milestone id does not belong to the goal."""
    pass


class CompletionStateError(GoalError):
    """Raised when a completion flow is confirmed or cancelled twice."""
    pass


class MissingActorError(GoalError):
    """Raised when an operation needs the current user and none is known."""
    pass


class MutationInFlightError(GoalError):
    """Raised when a goal already has a mutation waiting on persistence."""
    pass
