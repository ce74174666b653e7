"""Shared test fixtures for the goal engine."""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture(autouse=True)
def reset_metrics():
    """Metrics are a module singleton; isolate each test."""
    from observability import metrics

    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def goal_file(tmp_path):
    """YAML export with one goal using the legacy status vocabulary."""
    path = tmp_path / "goals.yaml"
    path.write_text(
        """
goals:
  - id: g1
    title: Ship onboarding revamp
    status: completed
    priority: high
    progressPercentage: 10
    milestones:
      - id: m1
        title: Research
        status: completed
      - id: m2
        title: Build
        completed: true
      - id: m3
        title: Launch
        status: partial
      - id: m4
        title: Retro
    linkedJournalEntries:
      - journalEntryId: j1
        linkedBy: u1
        contributionType: progress
        progressContribution: 40
    editHistory:
      - id: r1
        editedBy: u1
        editedAt: "2024-03-01T10:00:00"
        field: priority
        oldValue: medium
        newValue: high
        reason: Priority changed from medium to high
      - id: r2
        editedBy: u2
        editedAt: "2024-03-05T09:30:00"
        field: status
        oldValue: in-progress
        newValue: achieved
        reason: Status changed from in-progress to achieved
  - id: g2
    title: Learn Rust
    status: not-started
"""
    )
    return path
