"""Pydantic configuration schema for YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EngineSettings(BaseModel):
    max_retries: int | None = Field(default=None, ge=0)


class ScheduleSettings(BaseModel):
    due_days: int | None = Field(default=None, ge=0)


class ScreeningSettings(BaseModel):
    normalize: bool | None = None
    fuzzy_threshold: float | None = Field(default=None, ge=0, le=100)


class AppConfig(BaseModel):
    engine: EngineSettings = Field(default_factory=EngineSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    screening: ScreeningSettings = Field(default_factory=ScreeningSettings)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("engine", "schedule", "screening"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    """Validate a raw mapping; non-mapping input raises ``ValidationError``."""
    return AppConfig.model_validate(raw)
