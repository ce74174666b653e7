"""Command-line tooling for the goal engine."""
