"""Milestone completion states and their progress weights."""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from shared_types import MilestoneStatus

from .models import Milestone, as_utc, utc_now

WEIGHTS: dict[MilestoneStatus, float] = {
    MilestoneStatus.COMPLETED: 1.0,
    MilestoneStatus.PARTIAL: 0.5,
    MilestoneStatus.INCOMPLETE: 0.0,
}


def milestone_status(milestone: Milestone) -> MilestoneStatus:
    """Canonical state, falling back to the legacy ``completed`` flag."""
    if milestone.status is not None:
        return MilestoneStatus(milestone.status)
    return MilestoneStatus.COMPLETED if milestone.completed else MilestoneStatus.INCOMPLETE


def milestone_weight(milestone: Milestone) -> float:
    return WEIGHTS[milestone_status(milestone)]


def is_completed(milestone: Milestone) -> bool:
    return milestone_status(milestone) == MilestoneStatus.COMPLETED


def set_milestone_status(
    milestone: Milestone,
    status: MilestoneStatus,
    actor: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Milestone:
    """Return a copy of ``milestone`` in ``status``.

    Keeps the legacy boolean in step so older readers see the same state.
    """
    status = MilestoneStatus(status)
    done = status == MilestoneStatus.COMPLETED
    if done and not is_completed(milestone):
        completed_at = as_utc(now) if now else utc_now()
        completed_by = actor
    elif done:
        completed_at = milestone.completed_at
        completed_by = milestone.completed_by
    else:
        completed_at = None
        completed_by = None

    return replace(
        milestone,
        status=status,
        completed=done,
        completed_at=completed_at,
        completed_by=completed_by,
    )


def toggle_milestone(
    milestone: Milestone,
    actor: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Milestone:
    """The toggle gesture: completed goes back to incomplete, anything else completes.

    ``partial`` is never produced here; it is only set through direct editing.
    """
    if is_completed(milestone):
        return set_milestone_status(milestone, MilestoneStatus.INCOMPLETE)
    return set_milestone_status(milestone, MilestoneStatus.COMPLETED, actor=actor, now=now)


def new_milestone(milestone_id: str, title: str, target_date=None, description=None) -> Milestone:
    """Milestones always start incomplete."""
    return Milestone(
        id=milestone_id,
        title=title,
        target_date=target_date,
        status=MilestoneStatus.INCOMPLETE,
        completed=False,
        description=description,
    )


def count_by_status(milestones: list[Milestone]) -> dict[MilestoneStatus, int]:
    counts = {s: 0 for s in MilestoneStatus}
    for m in milestones:
        counts[milestone_status(m)] += 1
    return counts
