"""Language-understanding gateway: extraction, embeddings, and summaries.

Claude handles extraction and summarization; OpenAI produces embeddings.
The gateway is built once at application startup from :class:`Settings` and
passed to the pipeline and search engine, so tests can swap in a fake.
"""

from __future__ import annotations

import logging
from typing import Protocol

import anthropic
import openai
from anthropic import Anthropic
from openai import OpenAI

from src.config import Settings
from src.errors import GatewayError, GatewayTimeoutError
from src.extraction.extractor import request_extraction, response_text
from src.ingestion.embeddings import embed_texts

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "Summarize this meeting transcript in 2-3 clear sentences.\n"
    "Focus on key decisions, actions, and overall tone.\n"
    "Return only the summary text, no markdown, no explanations."
)


class LanguageGateway(Protocol):
    """Capabilities the ingestion pipeline and search engine depend on."""

    def extract(self, text: str) -> str:
        """Return the model's raw extraction text (may be malformed)."""
        ...

    def embed(self, text: str) -> list[float]: ...

    def summarize(self, text: str) -> str | None: ...


class LLMGateway:
    """:class:`LanguageGateway` backed by the Anthropic and OpenAI SDKs.

    SDK exceptions are translated into :class:`GatewayError`; timeouts become
    :class:`GatewayTimeoutError` so callers can tell them apart.
    """

    def __init__(
        self,
        anthropic_client: Anthropic,
        openai_client: OpenAI,
        llm_model: str,
        embedding_model: str = "text-embedding-3-small",
        embedding_dimensions: int | None = None,
        extraction_max_tokens: int = 2048,
        summary_max_tokens: int = 512,
    ) -> None:
        self._anthropic = anthropic_client
        self._openai = openai_client
        self.llm_model = llm_model
        self.embedding_model = embedding_model
        self.embedding_dimensions = embedding_dimensions
        self.extraction_max_tokens = extraction_max_tokens
        self.summary_max_tokens = summary_max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> LLMGateway:
        anthropic_client = Anthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.request_timeout_s,
            max_retries=settings.gateway_max_retries,
        )
        openai_client = OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.request_timeout_s,
            max_retries=settings.gateway_max_retries,
        )
        return cls(
            anthropic_client,
            openai_client,
            llm_model=settings.llm_model,
            embedding_model=settings.embedding_model,
            embedding_dimensions=settings.embedding_dimensions,
            extraction_max_tokens=settings.extraction_max_tokens,
            summary_max_tokens=settings.summary_max_tokens,
        )

    def extract(self, text: str) -> str:
        try:
            return request_extraction(
                self._anthropic, self.llm_model, text, self.extraction_max_tokens
            )
        except anthropic.APITimeoutError as exc:
            raise GatewayTimeoutError("extraction request timed out") from exc
        except anthropic.APIError as exc:
            raise GatewayError(f"extraction request failed: {exc.message}") from exc

    def embed(self, text: str) -> list[float]:
        try:
            vectors = embed_texts(
                self._openai,
                [text],
                model=self.embedding_model,
                dimensions=self.embedding_dimensions,
            )
        except openai.APITimeoutError as exc:
            raise GatewayTimeoutError("embedding request timed out") from exc
        except openai.APIError as exc:
            raise GatewayError(f"embedding request failed: {exc.message}") from exc

        if not vectors or not vectors[0]:
            raise GatewayError("embedding response contained no vector")
        return vectors[0]

    def summarize(self, text: str) -> str | None:
        try:
            response = self._anthropic.messages.create(
                model=self.llm_model,
                max_tokens=self.summary_max_tokens,
                system=SUMMARY_PROMPT,
                messages=[{"role": "user", "content": f"Transcript:\n\n{text}"}],
            )
        except anthropic.APITimeoutError as exc:
            raise GatewayTimeoutError("summary request timed out") from exc
        except anthropic.APIError as exc:
            raise GatewayError(f"summary request failed: {exc.message}") from exc

        summary = response_text(response)
        return summary or None
