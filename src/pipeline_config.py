"""Pipeline configuration: enums shared across ingestion/retrieval and PipelineConfig."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.config import Settings


class Sentiment(str, Enum):
    """Overall meeting sentiment as reported by extraction."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


# Numeric scale used by the sentiment trend rollup.
SENTIMENT_SCORES: dict[Sentiment, float] = {
    Sentiment.POSITIVE: 1.0,
    Sentiment.NEUTRAL: 0.5,
    Sentiment.NEGATIVE: 0.0,
}


class IngestionStage(str, Enum):
    """How far ingestion got for a stored transcript.

    Stages only move forward: created -> embedded -> summarized -> complete.
    """

    CREATED = "created"
    EMBEDDED = "embedded"
    SUMMARIZED = "summarized"
    COMPLETE = "complete"

    @property
    def order(self) -> int:
        return _STAGE_ORDER.index(self)

    def reached(self, other: IngestionStage) -> bool:
        """True if this stage is ``other`` or later."""
        return self.order >= other.order


_STAGE_ORDER = [
    IngestionStage.CREATED,
    IngestionStage.EMBEDDED,
    IngestionStage.SUMMARIZED,
    IngestionStage.COMPLETE,
]


class IngestStatus(str, Enum):
    """Outcome of a single ingest request."""

    PROCESSED = "processed"
    ALREADY_EXISTS = "already_exists"


class ExtractionOutcome(str, Enum):
    """Whether extraction output decoded cleanly or fell back to empty."""

    PARSED = "parsed"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for ingestion and retrieval.

    Defaults mirror the service's current behaviour (top-5 search).
    """

    search_top_k: int = 5

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(search_top_k=settings.search_top_k)
