"""Configuration loading and service wiring."""

from pathlib import Path
from typing import Optional

import yaml

from goals.ports import GoalRepository, Notifier, NullNotifier, StaticIdentity
from goals.service import GoalService

from .config_models import GoalEngineConfig

# Default config dict
DEFAULT_CONFIG = GoalEngineConfig().to_dict()


def find_config() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / "goalctl.yaml",
        Path.home() / ".goals" / "config.yaml",
    ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def load_config_model(config_path: Optional[Path] = None) -> GoalEngineConfig:
    """Load configuration as Pydantic model with validation."""
    base_config = {}

    path = config_path or find_config()
    if path and path.exists():
        try:
            with open(path) as f:
                base_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")

    try:
        return GoalEngineConfig.from_dict(base_config)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration as a plain dict."""
    return load_config_model(config_path).to_dict()


def build_service(
    config: GoalEngineConfig,
    repository: GoalRepository,
    notifier: Optional[Notifier] = None,
) -> GoalService:
    """GoalService configured from ``config``."""
    if not config.notifications.enabled:
        notifier = NullNotifier()
    return GoalService(
        repository,
        notifier=notifier,
        identity=StaticIdentity(config.identity.actor),
        milestone_cap=config.progress.milestone_cap,
        auto_advance=config.progress.auto_advance,
        messages=config.workflow.message_overrides(),
    )
