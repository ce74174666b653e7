"""Interfaces to the collaborators the goal core depends on."""

from abc import ABC, abstractmethod
from typing import Optional

from shared_types import GoalStatus

from .models import Goal, Milestone


class GoalRepository(ABC):
    """Persistence collaborator.

    ``update`` is a partial update keyed by Goal attribute names. It may carry
    ``edit_records``: EditRecords to append, in order, in the same write.
    Errors are raised as exceptions whose message can be classified
    (network / permission / validation / other).
    """

    @abstractmethod
    async def update_goal(self, goal_id: str, update: dict) -> Goal:
        """Apply a partial update and return the stored goal."""

    @abstractmethod
    async def toggle_milestone(self, goal_id: str, milestone_id: str) -> Goal:
        """Flip a milestone between incomplete and completed."""


class Notifier(ABC):
    """Notification collaborator. Fire-and-forget."""

    @abstractmethod
    def status_changed(
        self,
        goal: Goal,
        previous: GoalStatus,
        new: GoalStatus,
        actor: Optional[str],
    ) -> None:
        """Called after a committed status change."""

    @abstractmethod
    def milestone_completed(self, goal: Goal, milestone: Milestone, actor: Optional[str]) -> None:
        """Called after a milestone is committed as completed."""


class IdentityProvider(ABC):
    """Supplies the acting user id for edit history and links."""

    @abstractmethod
    def current_actor(self) -> Optional[str]:
        """Current user id, or None when unknown."""


class NullNotifier(Notifier):
    """Notifier that does nothing, for when notifications are disabled."""

    def status_changed(self, goal, previous, new, actor) -> None:
        return None

    def milestone_completed(self, goal, milestone, actor) -> None:
        return None


class StaticIdentity(IdentityProvider):
    """Fixed actor, e.g. the user a CLI or job runs as."""

    def __init__(self, actor: Optional[str]):
        self.actor = actor

    def current_actor(self) -> Optional[str]:
        return self.actor
