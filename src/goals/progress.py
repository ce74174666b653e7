"""Progress aggregation for goals.

Progress combines two sources:

1. Linked journal entries. Each link's ``progress_contribution`` is clamped
   to 0..100 and the clamped terms are summed with no cap at this stage.
2. Milestones. Completion weights (1.0 / 0.5 / 0.0) are averaged and scaled
   to at most ``MILESTONE_CAP`` percentage points.

The total is capped at 100 and floored to an integer. A manual override set
through the adjust-progress path takes precedence over the calculation.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from shared_types import GoalStatus

from .milestones import milestone_weight
from .models import Goal

MILESTONE_CAP = 30
MAX_PROGRESS = 100


@dataclass(frozen=True)
class ProgressBreakdown:
    journal_contribution: int
    milestone_weighted: float
    milestone_count: int
    milestone_contribution: float
    calculated: int
    override: Optional[int]

    @property
    def effective(self) -> int:
        return self.override if self.override is not None else self.calculated


def clamp_percent(value: float) -> int:
    return int(max(0, min(MAX_PROGRESS, value)))


def journal_contribution(goal: Goal) -> int:
    return sum(clamp_percent(link.progress_contribution) for link in goal.linked_journal_entries)


def milestone_contribution(goal: Goal, cap: int = MILESTONE_CAP) -> float:
    if not goal.milestones:
        return 0.0
    weighted = sum(milestone_weight(m) for m in goal.milestones)
    return cap * weighted / len(goal.milestones)


def progress_breakdown(goal: Goal, cap: int = MILESTONE_CAP) -> ProgressBreakdown:
    journal = journal_contribution(goal)
    weighted = sum(milestone_weight(m) for m in goal.milestones)
    milestones = milestone_contribution(goal, cap)
    calculated = min(MAX_PROGRESS, math.floor(journal + milestones))
    override = goal.progress_override
    return ProgressBreakdown(
        journal_contribution=journal,
        milestone_weighted=weighted,
        milestone_count=len(goal.milestones),
        milestone_contribution=milestones,
        calculated=calculated,
        override=clamp_percent(override) if override is not None else None,
    )


def calculated_progress(goal: Goal, cap: int = MILESTONE_CAP) -> int:
    """Pure aggregation from milestones and linked entries, ignoring overrides."""
    return progress_breakdown(goal, cap).calculated


def effective_progress(goal: Goal, cap: int = MILESTONE_CAP) -> int:
    """Progress shown for the goal, always within 0..100."""
    return progress_breakdown(goal, cap).effective


def is_achieved(goal: Goal) -> bool:
    return goal.canonical_status == GoalStatus.ACHIEVED


def needs_completion(goal: Goal, cap: int = MILESTONE_CAP) -> bool:
    return effective_progress(goal, cap) >= MAX_PROGRESS and not is_achieved(goal)


def implied_status(goal: Goal, cap: int = MILESTONE_CAP) -> Optional[GoalStatus]:
    """Status the goal should auto-advance to when this state is committed.

    Only yet-to-start goals with partial progress auto-advance. Reaching 100
    never advances directly; that goes through the completion flow.
    """
    progress = effective_progress(goal, cap)
    if 0 < progress < MAX_PROGRESS and goal.canonical_status == GoalStatus.YET_TO_START:
        return GoalStatus.IN_PROGRESS
    return None


def refresh_cached_progress(goal: Goal, cap: int = MILESTONE_CAP) -> Goal:
    """Copy of ``goal`` with ``progress_percentage`` recomputed."""
    return replace(goal, progress_percentage=effective_progress(goal, cap))
