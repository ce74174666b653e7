"""Tests for config loading and service wiring."""

from unittest.mock import MagicMock

import pytest

from cli.config import DEFAULT_CONFIG, build_service, load_config, load_config_model
from cli.config_models import GoalEngineConfig
from goals.ports import NullNotifier
from shared_types import ErrorKind


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        config = load_config_model(tmp_path / "missing.yaml")
        assert config.progress.milestone_cap == 30
        assert config.progress.auto_advance is True
        assert config.logging.level == "INFO"

    def test_values_from_file(self, tmp_path):
        path = tmp_path / "goalctl.yaml"
        path.write_text(
            "progress:\n  milestone_cap: 40\n  auto_advance: false\n"
            "identity:\n  actor: u42\n"
            "logging:\n  level: debug\n"
        )
        config = load_config_model(path)
        assert config.progress.milestone_cap == 40
        assert config.progress.auto_advance is False
        assert config.identity.actor == "u42"
        assert config.logging.level == "DEBUG"

    def test_flat_milestone_weight_migrated(self):
        config = GoalEngineConfig.from_dict({"milestone_weight": 25})
        assert config.progress.milestone_cap == 25

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "goalctl.yaml"
        path.write_text("progress: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config_model(path)

    @pytest.mark.parametrize(
        "content",
        [
            "progress:\n  milestone_cap: -1\n",
            "logging:\n  level: chatty\n",
            "workflow:\n  messages:\n    timeout: Took too long\n",
        ],
    )
    def test_validation_errors(self, tmp_path, content):
        path = tmp_path / "goalctl.yaml"
        path.write_text(content)
        with pytest.raises(ValueError, match="Config validation failed"):
            load_config_model(path)

    def test_load_config_dict(self, tmp_path):
        data = load_config(tmp_path / "missing.yaml")
        assert data == DEFAULT_CONFIG
        assert data["progress"]["milestone_cap"] == 30


class TestBuildService:
    def test_wiring(self):
        config = GoalEngineConfig.from_dict({
            "progress": {"milestone_cap": 50, "auto_advance": False},
            "identity": {"actor": "u9"},
            "workflow": {"messages": {"network": "Offline"}},
        })
        notifier = MagicMock()
        service = build_service(config, MagicMock(), notifier)

        assert service.milestone_cap == 50
        assert service.auto_advance is False
        assert service.notifier is notifier
        assert service.identity.current_actor() == "u9"
        assert service.messages == {ErrorKind.NETWORK: "Offline"}

    def test_notifications_disabled(self):
        config = GoalEngineConfig.from_dict({"notifications": {"enabled": False}})
        service = build_service(config, MagicMock(), MagicMock())
        assert isinstance(service.notifier, NullNotifier)
