"""Fixtures for goal core tests."""

import pytest

from goal_factories import FakeRepository, FixedIdentity, RecordingNotifier
from goals.service import GoalService


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def build_service(notifier):
    """Factory: service over a FakeRepository seeded with the given goals."""

    def _build(*goals, actor="u1", **kwargs):
        repo = FakeRepository(*goals)
        service = GoalService(repo, notifier=notifier, identity=FixedIdentity(actor), **kwargs)
        return service, repo

    return _build
