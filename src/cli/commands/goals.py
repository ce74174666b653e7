"""Goal inspection CLI commands."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from goals.completion import should_show_completion_dialog
from goals.history import history_for_display
from goals.loader import load_goals
from goals.milestones import count_by_status, milestone_status
from goals.progress import implied_status, progress_breakdown
from goals.status import is_valid_status, migrate_status, ordered_transitions
from shared_types import MilestoneStatus

console = Console()

_STATUS_STYLES = {
    "yet-to-start": "dim",
    "in-progress": "blue",
    "blocked": "red",
    "pending-review": "yellow",
    "achieved": "green",
    "cancelled": "dim",
}


def _styled(status) -> str:
    return f"[{_STATUS_STYLES.get(str(status), 'white')}]{status}[/]"


def _load(path: Path):
    try:
        return load_goals(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)


@click.command()
@click.argument("status")
def transitions(status: str):
    """Show statuses reachable from STATUS (legacy values accepted)."""
    canonical = migrate_status(status)
    if not is_valid_status(status):
        console.print(f"[dim]{status!r} read as[/] {_styled(canonical)}")
    targets = ordered_transitions(canonical)
    console.print(f"{_styled(canonical)} -> " + ", ".join(_styled(t) for t in targets))


@click.command()
@click.argument("goal_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def inspect(ctx, goal_file: Path):
    """Show status, transitions and progress for goals in GOAL_FILE."""
    cap = ctx.obj["config"].progress.milestone_cap if ctx.obj else 30

    for goal in _load(goal_file):
        b = progress_breakdown(goal, cap)
        console.print(f"\n[bold cyan]{goal.title or goal.id}[/] ({goal.id})")
        status_line = _styled(goal.canonical_status)
        if str(goal.status) != str(goal.canonical_status):
            status_line += f" [dim](stored as {goal.status!r})[/]"
        console.print(f"Status: {status_line}  Priority: {goal.priority}")
        console.print(
            "Transitions: " + ", ".join(_styled(t) for t in ordered_transitions(goal.status))
        )

        table = Table(show_header=True)
        table.add_column("Source")
        table.add_column("Points", justify="right")
        table.add_row("Journal entries", f"{b.journal_contribution} ({len(goal.linked_journal_entries)} linked)")
        table.add_row(
            "Milestones",
            f"{b.milestone_contribution:.2f} ({b.milestone_weighted:g}/{b.milestone_count} weighted)",
        )
        table.add_row("Calculated", f"[bold]{b.calculated}%[/]")
        if b.override is not None:
            table.add_row("Manual override", f"[bold]{b.override}%[/]")
        console.print(table)

        if goal.milestones:
            counts = count_by_status(goal.milestones)
            console.print(
                f"Milestones: {counts[MilestoneStatus.COMPLETED]} completed, "
                f"{counts[MilestoneStatus.PARTIAL]} partial, "
                f"{counts[MilestoneStatus.INCOMPLETE]} incomplete"
            )
        for m in goal.milestones:
            console.print(f"  - {m.title} [dim]{milestone_status(m)}[/]")

        if should_show_completion_dialog(goal, cap):
            console.print("[green]Ready for completion:[/] confirmation would be requested")
        advanced = implied_status(goal, cap)
        if advanced is not None:
            console.print(f"[yellow]Would auto-advance to[/] {_styled(advanced)}")
        if goal.progress_percentage != b.effective:
            console.print(
                f"[yellow]Cached progress {goal.progress_percentage}% is stale "
                f"(effective {b.effective}%)[/]"
            )


@click.command()
@click.argument("goal_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-n", "--limit", default=20, help="Max records per goal")
def history(goal_file: Path, limit: int):
    """Show edit history for goals in GOAL_FILE, newest first."""
    for goal in _load(goal_file):
        records = history_for_display(goal)[:limit]
        if not records:
            console.print(f"[yellow]No edit history for {goal.title or goal.id}.[/]")
            continue

        table = Table(show_header=True, title=goal.title or goal.id)
        table.add_column("When", style="cyan")
        table.add_column("By", style="green")
        table.add_column("Field", style="dim")
        table.add_column("Change")
        for r in records:
            table.add_row(r.edited_at.isoformat(timespec="minutes"), r.edited_by, r.field, r.reason)
        console.print(table)


@click.command()
@click.argument("goal_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def legacy(goal_file: Path):
    """List goals whose stored status uses an old vocabulary."""
    found = 0
    for goal in _load(goal_file):
        if is_valid_status(str(goal.status)):
            continue
        found += 1
        console.print(f"{goal.id}: {goal.status!r} -> {_styled(goal.canonical_status)}")
    if not found:
        console.print("[green]All statuses are current.[/]")
