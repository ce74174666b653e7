"""Load goal records exported from the data layer (YAML or JSON files)."""

from pathlib import Path

import structlog
import yaml

from .models import Goal

logger = structlog.get_logger()


def load_goals(path: Path) -> list[Goal]:
    """Read one goal or a list of goals from ``path``.

    Accepts a mapping (single goal), a list of mappings, or a mapping with a
    ``goals`` (or ``data``) list, which is how the API wraps collections.
    """
    path = Path(path).expanduser()
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid goal file {path}: {e}")

    if data is None:
        records = []
    elif isinstance(data, dict):
        if "goals" in data:
            records = data["goals"] or []
        elif "data" in data:
            records = data["data"] or []
        else:
            records = [data]
        if isinstance(records, dict):
            records = [records]
    elif isinstance(data, list):
        records = data
    else:
        raise ValueError(f"Goal file {path} must contain a mapping or a list")

    goals = []
    for raw in records:
        try:
            goals.append(Goal.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid goal record in {path}: {e}")
    logger.debug("goals_loaded", path=str(path), count=len(goals))
    return goals
