"""Edit history: field diffs, reason text and append-only records."""

from dataclasses import replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Optional

import structlog

from .models import EditRecord, Goal, as_utc, new_id, utc_now

logger = structlog.get_logger()

TRACKED_FIELDS = (
    "title",
    "description",
    "category",
    "priority",
    "status",
    "target_date",
    "assignee",
    "reviewer",
    "milestones_count",
    "tags",
)


def _show(value: Any) -> str:
    if value is None or value == "" or value == []:
        return "none"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _changed(label: str) -> Callable[[Any, Any], str]:
    return lambda old, new: f"{label} changed from {_show(old)} to {_show(new)}"


_REASONS: dict[str, Callable[[Any, Any], str]] = {
    "title": lambda old, new: f'Title changed from "{_show(old)}" to "{_show(new)}"',
    "description": lambda old, new: "Description updated",
    "category": _changed("Category"),
    "priority": _changed("Priority"),
    "status": _changed("Status"),
    "target_date": _changed("Target date"),
    "assignee": _changed("Assignee"),
    "reviewer": _changed("Reviewer"),
    "milestones_count": lambda old, new: (
        f"Milestone added ({old} to {new})" if (new or 0) > (old or 0)
        else f"Milestone removed ({old} to {new})"
    ),
    "tags": lambda old, new: f"Tags changed from {_show(old)} to {_show(new)}",
    "progress": lambda old, new: f"Progress adjusted from {_show(old)}% to {_show(new)}%",
}


def edit_reason(field: str, old_value: Any, new_value: Any) -> str:
    """Human-readable reason for a change, fixed per field."""
    template = _REASONS.get(field)
    if template is None:
        return f"{field} updated"
    return template(old_value, new_value)


def _plain(value: Any) -> Any:
    """Record-friendly value: enums to str, dates to ISO strings."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def field_value(goal: Goal, field: str) -> Any:
    if field == "status":
        return goal.canonical_status
    if field == "milestones_count":
        return len(goal.milestones)
    if field == "tags":
        return sorted(goal.tags)
    return getattr(goal, field)


def diff_goals(before: Goal, after: Goal) -> list[tuple[str, Any, Any]]:
    """(field, old, new) for each tracked field that differs."""
    changes = []
    for name in TRACKED_FIELDS:
        old = _plain(field_value(before, name))
        new = _plain(field_value(after, name))
        if old != new:
            changes.append((name, old, new))
    return changes


def build_records(
    changes: list[tuple[str, Any, Any]],
    actor: Optional[str],
    now: Optional[datetime] = None,
) -> list[EditRecord]:
    """One record per changed field, all sharing one timestamp.

    Returns an empty list when there is no actor; records are never written
    with a missing ``edited_by``.
    """
    if not changes:
        return []
    if not actor:
        logger.warning("edit_history_skipped", reason="no_actor", fields=[c[0] for c in changes])
        return []

    edited_at = as_utc(now) if now else utc_now()
    return [
        EditRecord(
            id=new_id(),
            edited_by=actor,
            edited_at=edited_at,
            field=name,
            old_value=_plain(old),
            new_value=_plain(new),
            reason=edit_reason(name, _plain(old), _plain(new)),
        )
        for name, old, new in changes
    ]


def append_records(goal: Goal, records: list[EditRecord]) -> Goal:
    """Copy of ``goal`` with ``records`` appended; existing entries are untouched."""
    if not records:
        return goal
    known = {r.id for r in goal.edit_history}
    fresh = [r for r in records if r.id not in known]
    return replace(goal, edit_history=[*goal.edit_history, *fresh])


def history_for_display(goal: Goal) -> list[EditRecord]:
    """Newest first. Records from one batch keep their original order.

    Records built in code may carry naive timestamps; they sort as UTC.
    """
    indexed = list(enumerate(goal.edit_history))
    indexed.sort(key=lambda pair: (as_utc(pair[1].edited_at), -pair[0]), reverse=True)
    return [record for _, record in indexed]
