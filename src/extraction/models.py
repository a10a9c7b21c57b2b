"""Data models for structured extraction results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.pipeline_config import ExtractionOutcome, Sentiment


class Extraction(BaseModel):
    """The fixed JSON shape requested from the extraction prompt."""

    model_config = ConfigDict(extra="ignore")

    topics: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    decisions: list[str] = Field(default_factory=list)
    sentiment: Sentiment = Sentiment.NEUTRAL

    @field_validator("topics", "action_items", "decisions", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("sentiment", mode="before")
    @classmethod
    def _normalise_sentiment(cls, value: Any) -> Any:
        if value is None:
            return Sentiment.NEUTRAL
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @classmethod
    def empty(cls) -> Extraction:
        return cls()


@dataclass(frozen=True)
class ExtractionResult:
    """Tagged decode result: either the parsed structure or the empty fallback."""

    outcome: ExtractionOutcome
    extraction: Extraction
    error: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.outcome is ExtractionOutcome.FALLBACK
