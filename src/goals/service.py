"""Goal card orchestration: quick actions, milestones, links and completion.

Every write goes through the repository as one partial update carrying the
changed fields and their edit records. Progress-affecting changes are first
simulated; if the simulated goal would reach 100% without being achieved, a
CompletionFlow is returned instead of committing anything.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional

import structlog

from observability import metrics
from shared_types import ContributionType, ErrorKind, GoalPriority, GoalStatus, MilestoneStatus

from .completion import (
    CompletionFlow,
    PendingMutation,
    requires_completion,
    should_show_completion_dialog,
)
from .errors import DuplicateLinkError, MissingActorError, MutationInFlightError
from .history import append_records, build_records, diff_goals
from .milestones import is_completed, new_milestone, set_milestone_status, toggle_milestone
from .models import Goal, JournalLink, new_id
from .ports import GoalRepository, IdentityProvider, Notifier, NullNotifier
from .progress import (
    MILESTONE_CAP,
    clamp_percent,
    effective_progress,
    implied_status,
    refresh_cached_progress,
)
from .status import ensure_transition, migrate_status
from .workflow import StatusWorkflow, classify_error, friendly_message

logger = structlog.get_logger()

EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "category",
    "priority",
    "status",
    "target_date",
    "assignee",
    "reviewer",
    "tags",
})


@dataclass
class MutationResult:
    """Outcome of a progress-affecting operation.

    When ``completion`` is set nothing was persisted and ``goal`` is the
    unchanged original; the caller must confirm or cancel the flow.
    """

    goal: Goal
    completion: Optional[CompletionFlow] = None

    @property
    def needs_confirmation(self) -> bool:
        return self.completion is not None


class GoalService:
    """Orchestrates mutations for goals shown on a card or list.

    Args:
        repository: Persistence collaborator
        notifier: Notification collaborator (defaults to no-op)
        identity: Supplies the acting user; without one, edit records are skipped
        milestone_cap: Max percentage points milestones can contribute
        auto_advance: Move yet-to-start goals to in-progress once progress > 0
        messages: Overrides for user-facing error messages
    """

    def __init__(
        self,
        repository: GoalRepository,
        notifier: Optional[Notifier] = None,
        identity: Optional[IdentityProvider] = None,
        milestone_cap: int = MILESTONE_CAP,
        auto_advance: bool = True,
        messages: Optional[dict[ErrorKind, str]] = None,
    ):
        self.repository = repository
        self.notifier = notifier or NullNotifier()
        self.identity = identity
        self.milestone_cap = milestone_cap
        self.auto_advance = auto_advance
        self.messages = messages
        self._in_flight: set[str] = set()

    # --- helpers ---

    def _actor(self) -> Optional[str]:
        if self.identity is None:
            return None
        return self.identity.current_actor()

    @asynccontextmanager
    async def _exclusive(self, goal_id: str):
        """One in-flight mutation per goal."""
        if goal_id in self._in_flight:
            raise MutationInFlightError(f"Goal {goal_id} already has a pending update")
        self._in_flight.add(goal_id)
        try:
            yield
        finally:
            self._in_flight.discard(goal_id)

    def _notify(self, before: Goal, after: Goal, actor: Optional[str]) -> None:
        """Fire status/milestone notifications; failures are only logged."""
        try:
            if before.canonical_status != after.canonical_status:
                self.notifier.status_changed(
                    after, before.canonical_status, after.canonical_status, actor
                )
            done_before = {m.id for m in before.milestones if is_completed(m)}
            for m in after.milestones:
                if is_completed(m) and m.id not in done_before:
                    self.notifier.milestone_completed(after, m, actor)
        except Exception as e:
            metrics.counter("notifier.failed")
            logger.warning("notifier_failed", goal_id=after.id, error=str(e))

    async def _commit(self, before: Goal, changes: dict) -> Goal:
        """Persist ``changes`` together with one edit record per changed field."""
        after = replace(before, **changes)
        field_changes = diff_goals(before, after)
        if "progress_override" in changes:
            old = effective_progress(before, self.milestone_cap)
            new = effective_progress(after, self.milestone_cap)
            field_changes.append(("progress", old, new))

        actor = self._actor()
        update = dict(changes)
        records = build_records(field_changes, actor)
        if records:
            update["edit_records"] = records

        async with self._exclusive(before.id):
            with metrics.timer("repository.update_goal"):
                committed = await self.repository.update_goal(before.id, update)
        # Repositories that return the goal without its new history still show it
        committed = append_records(committed, records)

        metrics.counter("goal.committed")
        logger.info(
            "goal_committed",
            goal_id=before.id,
            fields=sorted(changes),
            actor=actor,
            records=len(records),
        )
        self._notify(before, committed, actor)
        return committed

    async def _apply(self, goal: Goal, mutation: PendingMutation) -> MutationResult:
        """Simulate, then either prompt for completion or commit."""
        simulated = mutation.apply(goal, self.milestone_cap)
        if should_show_completion_dialog(simulated, self.milestone_cap):
            flow = CompletionFlow(goal, mutation, self.milestone_cap)
            metrics.counter("completion.prompted")
            logger.info("completion_prompted", goal_id=goal.id, label=mutation.label)
            return MutationResult(goal=goal, completion=flow)

        changes = dict(mutation.changes)
        changes["progress_percentage"] = simulated.progress_percentage
        advanced = implied_status(simulated, self.milestone_cap) if self.auto_advance else None
        if advanced is not None:
            changes["status"] = advanced

        committed = await self._commit(goal, changes)
        return MutationResult(goal=committed)

    # --- status workflow ---

    def workflow_for(self, goal: Goal, disabled: bool = False) -> StatusWorkflow:
        """Status workflow wired to change_status for this goal."""
        workflow: Optional[StatusWorkflow] = None

        async def handler(goal_id: str, target: GoalStatus) -> Goal:
            return await self.change_status(workflow.goal, target)

        workflow = StatusWorkflow(goal, handler, disabled=disabled, messages=self.messages)
        return workflow

    async def change_status(self, goal: Goal, target: GoalStatus | str) -> Goal:
        """Explicit status change. Raises on invalid transitions and persistence errors."""
        canonical = ensure_transition(goal.status, target)
        return await self._commit(goal, {"status": canonical})

    # --- quick actions and edits ---

    async def change_priority(self, goal: Goal, priority: GoalPriority | str) -> Goal:
        priority = GoalPriority(priority)
        if priority == goal.priority:
            return goal
        return await self._commit(goal, {"priority": priority})

    async def update_fields(self, goal: Goal, **changes: Any) -> Goal:
        """Edit several fields at once; one edit record per changed field."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable here: {sorted(unknown)}")

        if "status" in changes:
            if migrate_status(changes["status"]) == goal.canonical_status:
                del changes["status"]
            else:
                changes["status"] = ensure_transition(goal.status, changes["status"])
        if "priority" in changes:
            changes["priority"] = GoalPriority(changes["priority"])
        if isinstance(changes.get("target_date"), datetime):
            changes["target_date"] = changes["target_date"].date()
        if "tags" in changes:
            changes["tags"] = list(changes["tags"] or [])

        if not diff_goals(goal, replace(goal, **changes)):
            return goal
        return await self._commit(goal, changes)

    # --- milestones ---

    async def toggle_milestone(self, goal: Goal, milestone_id: str) -> MutationResult:
        """Toggle gesture: incomplete/partial -> completed, completed -> incomplete."""
        actor = self._actor()
        toggled = toggle_milestone(goal.milestone(milestone_id), actor=actor)
        milestones = [toggled if m.id == milestone_id else m for m in goal.milestones]
        mutation = PendingMutation(
            goal.id, {"milestones": milestones}, label=f"toggle milestone {milestone_id}"
        )

        if requires_completion(goal, mutation, self.milestone_cap):
            return await self._apply(goal, mutation)

        async with self._exclusive(goal.id):
            with metrics.timer("repository.toggle_milestone"):
                stored = await self.repository.toggle_milestone(goal.id, milestone_id)
        committed = refresh_cached_progress(stored, self.milestone_cap)
        self._notify(goal, committed, actor)

        # The repository toggle only flips the milestone; write back the cached progress
        follow_up = {}
        if committed.progress_percentage != stored.progress_percentage:
            follow_up["progress_percentage"] = committed.progress_percentage
        if self.auto_advance and implied_status(committed, self.milestone_cap) is not None:
            follow_up["status"] = GoalStatus.IN_PROGRESS
        if follow_up:
            committed = await self._commit(committed, follow_up)
        return MutationResult(goal=committed)

    async def set_milestone_status(
        self, goal: Goal, milestone_id: str, status: MilestoneStatus | str
    ) -> MutationResult:
        """Direct edit; the only way to mark a milestone partial."""
        updated = set_milestone_status(goal.milestone(milestone_id), status, actor=self._actor())
        milestones = [updated if m.id == milestone_id else m for m in goal.milestones]
        return await self._apply(
            goal,
            PendingMutation(goal.id, {"milestones": milestones}, label=f"edit milestone {milestone_id}"),
        )

    async def add_milestone(
        self,
        goal: Goal,
        title: str,
        target_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> MutationResult:
        milestone = new_milestone(new_id(), title, target_date=target_date, description=description)
        return await self._apply(
            goal,
            PendingMutation(goal.id, {"milestones": [*goal.milestones, milestone]}, label="add milestone"),
        )

    async def remove_milestone(self, goal: Goal, milestone_id: str) -> MutationResult:
        goal.milestone(milestone_id)
        milestones = [m for m in goal.milestones if m.id != milestone_id]
        return await self._apply(
            goal,
            PendingMutation(goal.id, {"milestones": milestones}, label=f"remove milestone {milestone_id}"),
        )

    # --- journal links ---

    async def link_journal_entry(
        self,
        goal: Goal,
        journal_entry_id: str,
        contribution_type: ContributionType | str = ContributionType.PROGRESS,
        progress_contribution: int = 0,
    ) -> MutationResult:
        if goal.link_for(journal_entry_id) is not None:
            raise DuplicateLinkError(f"Entry {journal_entry_id} is already linked to goal {goal.id}")
        actor = self._actor()
        if not actor:
            raise MissingActorError("Cannot link a journal entry without a current user")

        link = JournalLink(
            journal_entry_id=journal_entry_id,
            linked_by=actor,
            contribution_type=ContributionType(contribution_type),
            progress_contribution=int(progress_contribution),
        )
        return await self._apply(
            goal,
            PendingMutation(
                goal.id,
                {"linked_journal_entries": [*goal.linked_journal_entries, link]},
                label=f"link entry {journal_entry_id}",
            ),
        )

    async def unlink_journal_entry(self, goal: Goal, journal_entry_id: str) -> MutationResult:
        if goal.link_for(journal_entry_id) is None:
            return MutationResult(goal=goal)
        links = [
            link for link in goal.linked_journal_entries if link.journal_entry_id != journal_entry_id
        ]
        return await self._apply(
            goal,
            PendingMutation(
                goal.id, {"linked_journal_entries": links}, label=f"unlink entry {journal_entry_id}"
            ),
        )

    # --- progress adjustment ---

    async def adjust_progress(self, goal: Goal, value: Optional[int]) -> MutationResult:
        """Set a manual progress value, or None to go back to auto-calculation."""
        override = clamp_percent(value) if value is not None else None
        if override == goal.progress_override:
            return MutationResult(goal=goal)
        return await self._apply(
            goal,
            PendingMutation(goal.id, {"progress_override": override}, label="adjust progress"),
        )

    # --- completion ---

    async def confirm_completion(self, flow: CompletionFlow, notes: Optional[str] = None) -> Goal:
        """Commit the pending change, achieved status and notes in one update.

        On failure the flow records the error and the original goal is
        returned; nothing is applied partially.
        """
        flow.begin_confirm()
        changes = flow.completion_changes(notes)
        changes["progress_percentage"] = effective_progress(flow.simulated, self.milestone_cap)

        try:
            committed = await self._commit(flow.original, changes)
        except Exception as e:
            kind = classify_error(e)
            flow.mark_failed(kind, friendly_message(kind, e, self.messages))
            metrics.counter("completion.failed")
            logger.warning(
                "completion_failed", goal_id=flow.original.id, kind=str(kind), error=str(e)
            )
            return flow.original

        flow.mark_committed(committed)
        metrics.counter("completion.committed")
        return committed

    def cancel_completion(self, flow: CompletionFlow) -> Goal:
        metrics.counter("completion.cancelled")
        return flow.cancel()
