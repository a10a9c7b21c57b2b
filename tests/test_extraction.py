"""Tests for extraction decoding and the Claude/OpenAI gateway (no external APIs required)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import anthropic
import httpx
import openai
import pytest
from anthropic.types import TextBlock

from src.config import Settings
from src.errors import GatewayError, GatewayTimeoutError
from src.extraction.decoder import decode_extraction, strip_fences
from src.extraction.extractor import request_extraction
from src.pipeline_config import ExtractionOutcome, Sentiment
from src.understanding.gateway import LLMGateway
from tests.fakes import GOOD_EXTRACTION

# ---------------------------------------------------------------------------
# Decoder tests
# ---------------------------------------------------------------------------


class TestDecodeExtraction:
    def test_plain_json(self) -> None:
        result = decode_extraction(GOOD_EXTRACTION)
        assert result.outcome is ExtractionOutcome.PARSED
        assert not result.is_fallback
        assert result.extraction.topics == ["Budget", "Hiring"]
        assert result.extraction.action_items == ["Send the Q4 forecast"]
        assert result.extraction.decisions == ["Freeze travel spend"]
        assert result.extraction.sentiment is Sentiment.POSITIVE

    def test_fenced_json(self) -> None:
        raw = f"```json\n{GOOD_EXTRACTION}\n```"
        result = decode_extraction(raw)
        assert result.outcome is ExtractionOutcome.PARSED
        assert result.extraction.topics == ["Budget", "Hiring"]

    def test_bare_fence(self) -> None:
        result = decode_extraction(f"```\n{GOOD_EXTRACTION}\n```")
        assert result.outcome is ExtractionOutcome.PARSED

    def test_non_json_falls_back(self) -> None:
        result = decode_extraction("Sorry, I can't help with that.")
        assert result.outcome is ExtractionOutcome.FALLBACK
        assert result.is_fallback
        assert result.extraction.topics == []
        assert result.extraction.action_items == []
        assert result.extraction.decisions == []
        assert result.extraction.sentiment is Sentiment.NEUTRAL
        assert result.error

    @pytest.mark.parametrize("raw", [None, "", "   ", "[]", '"just a string"'])
    def test_empty_or_wrong_type_falls_back(self, raw: str | None) -> None:
        assert decode_extraction(raw).is_fallback

    def test_unknown_sentiment_falls_back(self) -> None:
        raw = '{"topics": [], "action_items": [], "decisions": [], "sentiment": "ecstatic"}'
        assert decode_extraction(raw).is_fallback

    def test_sentiment_is_case_insensitive(self) -> None:
        raw = '{"topics": ["A"], "sentiment": " Negative "}'
        result = decode_extraction(raw)
        assert result.outcome is ExtractionOutcome.PARSED
        assert result.extraction.sentiment is Sentiment.NEGATIVE

    def test_missing_keys_default(self) -> None:
        result = decode_extraction('{"topics": ["Roadmap"]}')
        assert result.outcome is ExtractionOutcome.PARSED
        assert result.extraction.topics == ["Roadmap"]
        assert result.extraction.action_items == []
        assert result.extraction.sentiment is Sentiment.NEUTRAL

    def test_null_lists_become_empty(self) -> None:
        raw = '{"topics": null, "action_items": null, "decisions": null, "sentiment": null}'
        result = decode_extraction(raw)
        assert result.outcome is ExtractionOutcome.PARSED
        assert result.extraction.topics == []
        assert result.extraction.sentiment is Sentiment.NEUTRAL

    def test_extra_keys_ignored(self) -> None:
        result = decode_extraction('{"topics": ["X"], "confidence": 0.9}')
        assert result.outcome is ExtractionOutcome.PARSED

    def test_fallback_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="src.extraction.decoder"):
            decode_extraction("not json")
        assert "empty extraction" in caplog.text


def test_strip_fences() -> None:
    assert strip_fences("```json\n{}\n```") == "{}"
    assert strip_fences("  {}  ") == "{}"


# ---------------------------------------------------------------------------
# Extractor / gateway tests
# ---------------------------------------------------------------------------


def _claude_response(text: str) -> MagicMock:
    response = MagicMock()
    response.content = [TextBlock(type="text", text=text)]
    return response


def _timeout_request() -> httpx.Request:
    return httpx.Request("POST", "https://example.invalid")


class TestRequestExtraction:
    def test_returns_raw_text(self) -> None:
        client = MagicMock()
        client.messages.create.return_value = _claude_response(f"```json\n{GOOD_EXTRACTION}\n```")

        raw = request_extraction(client, "claude-test", "Transcript text", max_tokens=100)

        assert raw.startswith("```json")
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 100
        assert "Transcript text" in kwargs["messages"][0]["content"]

    def test_no_text_blocks_returns_empty(self) -> None:
        client = MagicMock()
        response = MagicMock()
        response.content = []
        client.messages.create.return_value = response
        assert request_extraction(client, "m", "t", max_tokens=10) == ""


class TestLLMGateway:
    def _gateway(self) -> tuple[LLMGateway, MagicMock, MagicMock]:
        claude = MagicMock()
        oai = MagicMock()
        return LLMGateway(claude, oai, llm_model="claude-test"), claude, oai

    def test_extract(self) -> None:
        gateway, claude, _ = self._gateway()
        claude.messages.create.return_value = _claude_response(GOOD_EXTRACTION)
        assert gateway.extract("text") == GOOD_EXTRACTION

    def test_embed(self) -> None:
        gateway, _, oai = self._gateway()
        item = MagicMock()
        item.embedding = [0.1, 0.2, 0.3]
        oai.embeddings.create.return_value.data = [item]

        assert gateway.embed("hello") == [0.1, 0.2, 0.3]
        kwargs = oai.embeddings.create.call_args.kwargs
        assert kwargs["input"] == ["hello"]
        assert kwargs["model"] == "text-embedding-3-small"

    def test_embed_empty_response_raises(self) -> None:
        gateway, _, oai = self._gateway()
        oai.embeddings.create.return_value.data = []
        with pytest.raises(GatewayError):
            gateway.embed("hello")

    def test_embed_timeout_is_retryable(self) -> None:
        gateway, _, oai = self._gateway()
        oai.embeddings.create.side_effect = openai.APITimeoutError(request=_timeout_request())
        with pytest.raises(GatewayTimeoutError) as exc_info:
            gateway.embed("hello")
        assert exc_info.value.retryable

    def test_summarize(self) -> None:
        gateway, claude, _ = self._gateway()
        claude.messages.create.return_value = _claude_response("  A short summary.  ")
        assert gateway.summarize("text") == "A short summary."

    def test_summarize_empty_returns_none(self) -> None:
        gateway, claude, _ = self._gateway()
        claude.messages.create.return_value = _claude_response("")
        assert gateway.summarize("text") is None

    def test_summarize_connection_error(self) -> None:
        gateway, claude, _ = self._gateway()
        claude.messages.create.side_effect = anthropic.APIConnectionError(
            request=_timeout_request()
        )
        with pytest.raises(GatewayError) as exc_info:
            gateway.summarize("text")
        assert not exc_info.value.retryable

    def test_extract_timeout(self) -> None:
        gateway, claude, _ = self._gateway()
        claude.messages.create.side_effect = anthropic.APITimeoutError(request=_timeout_request())
        with pytest.raises(GatewayTimeoutError):
            gateway.extract("text")

    @patch("src.understanding.gateway.OpenAI")
    @patch("src.understanding.gateway.Anthropic")
    def test_from_settings_applies_timeout(
        self, mock_anthropic: MagicMock, mock_openai: MagicMock
    ) -> None:
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            anthropic_api_key="a-key",
            openai_api_key="o-key",
            request_timeout_s=12.5,
            gateway_max_retries=1,
        )
        gateway = LLMGateway.from_settings(settings)

        mock_anthropic.assert_called_once_with(api_key="a-key", timeout=12.5, max_retries=1)
        mock_openai.assert_called_once_with(api_key="o-key", timeout=12.5, max_retries=1)
        assert gateway.llm_model == settings.llm_model
        assert gateway.embedding_dimensions == settings.embedding_dimensions
