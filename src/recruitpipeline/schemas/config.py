"""Pydantic configuration schema for YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RankingSection(BaseModel):
    resume_max: float | None = None
    video_max: float | None = None
    cover_letter_max: float | None = None
    composite_display_max: float | None = None
    first_round_max_combined: float | None = None
    first_round_scale: float | None = None
    min_search_similarity: float | None = None
    decision_weights: dict[str, float] | None = None

    model_config = ConfigDict(extra="forbid")


class DecisionSection(BaseModel):
    cache_ttl_seconds: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class AutoSaveSection(BaseModel):
    delay_ms: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class AdvancementSection(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")


class NotifierSection(BaseModel):
    endpoint: str | None = None
    api_key: str | None = None
    timeout: float | None = None

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    ranking: RankingSection = Field(default_factory=RankingSection)
    decisions: DecisionSection = Field(default_factory=DecisionSection)
    autosave: AutoSaveSection = Field(default_factory=AutoSaveSection)
    advancement: AdvancementSection = Field(default_factory=AdvancementSection)
    notifier: NotifierSection = Field(default_factory=NotifierSection)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for name in ("ranking", "decisions", "autosave", "advancement", "notifier"):
            section = getattr(self, name).model_dump(exclude_none=True)
            if section:
                settings[name] = section
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise TypeError("Config must be a mapping")
    return AppConfig.model_validate(raw)
