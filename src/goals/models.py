"""Data records for goals, milestones, journal links and edit history."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

from shared_types import ContributionType, GoalPriority, GoalStatus, MilestoneStatus

from .errors import MilestoneNotFoundError
from .status import migrate_status


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present key, so camelCase and snake_case both load."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def as_utc(value: datetime) -> datetime:
    """Timestamps without an offset are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return _parse_datetime(value).date()


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Task:
    id: str
    title: str
    completed: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            completed=bool(data.get("completed", False)),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "completed": self.completed}


@dataclass
class Milestone:
    """A goal milestone.

    ``status`` is the canonical field. ``completed`` is the legacy boolean and
    is only consulted when ``status`` is None (see goals.milestones).
    """

    id: str
    title: str
    target_date: Optional[date] = None
    status: Optional[MilestoneStatus] = MilestoneStatus.INCOMPLETE
    completed: bool = False
    tasks: list[Task] = field(default_factory=list)
    description: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Milestone":
        raw_status = data.get("status")
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            target_date=_parse_date(_pick(data, "target_date", "targetDate")),
            status=MilestoneStatus(raw_status) if raw_status else None,
            completed=bool(data.get("completed", False)),
            tasks=[Task.from_dict(t) for t in data.get("tasks") or []],
            description=data.get("description"),
            completed_at=_parse_datetime(_pick(data, "completed_at", "completedAt")),
            completed_by=_pick(data, "completed_by", "completedBy"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "target_date": _iso(self.target_date),
            "status": str(self.status) if self.status else None,
            "completed": self.completed,
            "tasks": [t.to_dict() for t in self.tasks],
            "description": self.description,
            "completed_at": _iso(self.completed_at),
            "completed_by": self.completed_by,
        }


@dataclass
class JournalLink:
    journal_entry_id: str
    linked_by: str
    contribution_type: ContributionType = ContributionType.PROGRESS
    progress_contribution: int = 0
    linked_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: dict) -> "JournalLink":
        return cls(
            journal_entry_id=str(_pick(data, "journal_entry_id", "journalEntryId", "id")),
            linked_by=_pick(data, "linked_by", "linkedBy", default=""),
            contribution_type=ContributionType(
                _pick(data, "contribution_type", "contributionType", default="progress")
            ),
            progress_contribution=int(
                _pick(data, "progress_contribution", "progressContribution", default=0)
            ),
            linked_at=_parse_datetime(_pick(data, "linked_at", "linkedAt")) or utc_now(),
        )

    def to_dict(self) -> dict:
        return {
            "journal_entry_id": self.journal_entry_id,
            "linked_by": self.linked_by,
            "contribution_type": str(self.contribution_type),
            "progress_contribution": self.progress_contribution,
            "linked_at": self.linked_at.isoformat(),
        }


@dataclass(frozen=True)
class EditRecord:
    """One field-level change to a goal. Never mutated once created."""

    id: str
    edited_by: str
    edited_at: datetime
    field: str
    old_value: Any
    new_value: Any
    reason: str

    @classmethod
    def from_dict(cls, data: dict) -> "EditRecord":
        edited_by = _pick(data, "edited_by", "editedBy", default="")
        if isinstance(edited_by, dict):
            edited_by = edited_by.get("id", "")
        return cls(
            id=str(data.get("id") or new_id()),
            edited_by=edited_by,
            edited_at=_parse_datetime(_pick(data, "edited_at", "editedAt")) or utc_now(),
            field=data["field"],
            old_value=_pick(data, "old_value", "oldValue"),
            new_value=_pick(data, "new_value", "newValue"),
            reason=data.get("reason") or f"{data['field']} updated",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "edited_by": self.edited_by,
            "edited_at": self.edited_at.isoformat(),
            "field": self.field,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "reason": self.reason,
        }


@dataclass
class Goal:
    """A goal as read from the external data layer.

    ``status`` keeps the raw stored string. Read it through
    ``canonical_status`` so legacy vocabulary is normalized on every read.
    ``progress_percentage`` is a cached display value; goals.progress is
    the source of truth.
    """

    id: str
    title: str = ""
    status: str = GoalStatus.YET_TO_START
    priority: GoalPriority = GoalPriority.MEDIUM
    progress_percentage: int = 0
    target_date: Optional[date] = None
    milestones: list[Milestone] = field(default_factory=list)
    linked_journal_entries: list[JournalLink] = field(default_factory=list)
    edit_history: list[EditRecord] = field(default_factory=list)
    completion_notes: Optional[str] = None
    description: str = ""
    category: Optional[str] = None
    assignee: Optional[str] = None
    reviewer: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    progress_override: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def canonical_status(self) -> GoalStatus:
        return migrate_status(self.status)

    def milestone(self, milestone_id: str) -> Milestone:
        for m in self.milestones:
            if m.id == milestone_id:
                return m
        raise MilestoneNotFoundError(f"Milestone {milestone_id} not found on goal {self.id}")

    def link_for(self, journal_entry_id: str) -> Optional[JournalLink]:
        for link in self.linked_journal_entries:
            if link.journal_entry_id == journal_entry_id:
                return link
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        links: list[JournalLink] = []
        seen: set[str] = set()
        for raw in _pick(data, "linked_journal_entries", "linkedJournalEntries", default=[]):
            link = JournalLink.from_dict(raw)
            # Keyed by entry id: first link wins
            if link.journal_entry_id in seen:
                continue
            seen.add(link.journal_entry_id)
            links.append(link)

        override = _pick(data, "progress_override", "progressOverride")
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            status=data.get("status") or GoalStatus.YET_TO_START,
            priority=GoalPriority(data.get("priority") or GoalPriority.MEDIUM),
            progress_percentage=int(
                _pick(data, "progress_percentage", "progressPercentage", "progress", default=0)
            ),
            target_date=_parse_date(_pick(data, "target_date", "targetDate")),
            milestones=[Milestone.from_dict(m) for m in data.get("milestones") or []],
            linked_journal_entries=links,
            edit_history=[
                EditRecord.from_dict(r)
                for r in _pick(data, "edit_history", "editHistory", default=[])
            ],
            completion_notes=_pick(data, "completion_notes", "completionNotes"),
            description=data.get("description") or "",
            category=data.get("category"),
            assignee=data.get("assignee"),
            reviewer=data.get("reviewer"),
            tags=list(data.get("tags") or []),
            progress_override=int(override) if override is not None else None,
            created_at=_parse_datetime(_pick(data, "created_at", "createdAt")),
            updated_at=_parse_datetime(_pick(data, "updated_at", "updatedAt")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "status": str(self.status),
            "priority": str(self.priority),
            "progress_percentage": self.progress_percentage,
            "target_date": _iso(self.target_date),
            "milestones": [m.to_dict() for m in self.milestones],
            "linked_journal_entries": [link.to_dict() for link in self.linked_journal_entries],
            "edit_history": [r.to_dict() for r in self.edit_history],
            "completion_notes": self.completion_notes,
            "description": self.description,
            "category": self.category,
            "assignee": self.assignee,
            "reviewer": self.reviewer,
            "tags": list(self.tags),
            "progress_override": self.progress_override,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
