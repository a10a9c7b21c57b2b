"""Tests for Settings, PipelineConfig, and the shared enums."""

from __future__ import annotations

import pytest

from src.config import Settings
from src.pipeline_config import (
    SENTIMENT_SCORES,
    IngestionStage,
    IngestStatus,
    PipelineConfig,
    Sentiment,
)

# ---------------------------------------------------------------------------
# Enum tests
# ---------------------------------------------------------------------------


class TestSentiment:
    def test_values(self) -> None:
        assert [s.value for s in Sentiment] == ["positive", "neutral", "negative"]

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            Sentiment("ecstatic")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(Sentiment.POSITIVE, str)

    def test_scores(self) -> None:
        assert SENTIMENT_SCORES == {
            Sentiment.POSITIVE: 1.0,
            Sentiment.NEUTRAL: 0.5,
            Sentiment.NEGATIVE: 0.0,
        }


class TestIngestionStage:
    def test_order(self) -> None:
        stages = list(IngestionStage)
        assert [s.order for s in stages] == [0, 1, 2, 3]

    def test_reached(self) -> None:
        assert IngestionStage.SUMMARIZED.reached(IngestionStage.EMBEDDED)
        assert IngestionStage.EMBEDDED.reached(IngestionStage.EMBEDDED)
        assert not IngestionStage.CREATED.reached(IngestionStage.EMBEDDED)
        assert IngestionStage.COMPLETE.reached(IngestionStage.SUMMARIZED)

    def test_from_string(self) -> None:
        assert IngestionStage("complete") is IngestionStage.COMPLETE


def test_ingest_status_values() -> None:
    assert IngestStatus.PROCESSED.value == "processed"
    assert IngestStatus.ALREADY_EXISTS.value == "already_exists"


# ---------------------------------------------------------------------------
# PipelineConfig / Settings tests
# ---------------------------------------------------------------------------


class TestPipelineConfig:
    def test_defaults(self) -> None:
        assert PipelineConfig().search_top_k == 5

    def test_immutable(self) -> None:
        cfg = PipelineConfig()
        with pytest.raises(AttributeError):
            cfg.search_top_k = 10  # type: ignore[misc]

    def test_from_settings(self) -> None:
        settings = Settings(_env_file=None, search_top_k=3)  # type: ignore[call-arg]
        assert PipelineConfig.from_settings(settings).search_top_k == 3


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REQUEST_TIMEOUT_S", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.request_timeout_s == 30.0
        assert settings.log_level == "INFO"
        assert settings.embedding_dimensions == 1536

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REQUEST_TIMEOUT_S", "5")
        monkeypatch.setenv("SEARCH_TOP_K", "8")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.request_timeout_s == 5.0
        assert settings.search_top_k == 8
