"""Pydantic configuration models for the goal engine."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from shared_types import ErrorKind


class ProgressConfig(BaseModel):
    """Progress aggregation tunables."""

    milestone_cap: int = 30
    auto_advance: bool = True

    @field_validator("milestone_cap")
    @classmethod
    def validate_cap(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"milestone_cap must be 0-100, got {v}")
        return v


class WorkflowConfig(BaseModel):
    """Status workflow configuration."""

    # Per-kind overrides of the user-facing failure messages
    messages: dict[str, str] = Field(default_factory=dict)

    @field_validator("messages")
    @classmethod
    def validate_kinds(cls, v: dict[str, str]) -> dict[str, str]:
        valid = {k.value for k in ErrorKind}
        unknown = set(v) - valid
        if unknown:
            raise ValueError(f"Unknown error kinds: {sorted(unknown)}. Must be one of {valid}")
        return v

    def message_overrides(self) -> dict[ErrorKind, str]:
        return {ErrorKind(k): text for k, text in self.messages.items()}


class NotificationsConfig(BaseModel):
    """Notification triggering."""

    enabled: bool = True


class IdentityConfig(BaseModel):
    """Who edits are attributed to when running from the CLI."""

    actor: Optional[str] = None


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class GoalEngineConfig(BaseModel):
    """Main configuration model."""

    progress: ProgressConfig = Field(default_factory=ProgressConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "GoalEngineConfig":
        """Create config from dict, accepting the old flat ``milestone_weight`` key."""
        data = dict(data)
        if "milestone_weight" in data:
            progress = dict(data.get("progress") or {})
            progress.setdefault("milestone_cap", data.pop("milestone_weight"))
            data["progress"] = progress
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")
