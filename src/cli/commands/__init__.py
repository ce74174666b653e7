"""CLI command modules."""

from .goals import history, inspect, legacy, transitions

__all__ = ["history", "inspect", "legacy", "transitions"]
