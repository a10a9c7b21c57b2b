"""Semantic search: rank every embedded transcript against a query."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from src.ingestion.storage import TranscriptStore
from src.pipeline_config import PipelineConfig
from src.retrieval.similarity import cosine_similarity
from src.understanding.gateway import LanguageGateway

logger = logging.getLogger(__name__)


@dataclass
class SearchHit:
    transcript: dict[str, Any]
    score: float


class SearchEngine:
    """Brute-force cosine ranking over all stored transcript embeddings.

    Every query scans the whole embeddings table, so cost grows linearly with
    the corpus. Transcripts without an embedding are never candidates.
    """

    def __init__(
        self,
        gateway: LanguageGateway,
        store: TranscriptStore,
        config: PipelineConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self.top_k = (config or PipelineConfig()).search_top_k

    def search(self, query: str, top_k: int | None = None) -> list[SearchHit]:
        """Return up to ``top_k`` transcripts, best match first.

        Ties keep the order in which embeddings were loaded.

        Args:
            query: Free-text search query.
            top_k: Result count; defaults to the configured ``search_top_k``.

        Returns:
            List of :class:`SearchHit`, sorted by descending score.
        """
        limit = self.top_k if top_k is None else top_k
        query_vector = self._gateway.embed(query)

        hits = [
            SearchHit(
                transcript=row["transcript"],
                score=cosine_similarity(query_vector, row["vector"]),
            )
            for row in self._store.list_embeddings()
        ]
        logger.debug("Scored %d transcripts for query %r", len(hits), query)

        # sorted() is stable, so equal scores stay in load order.
        hits = sorted(hits, key=lambda h: h.score, reverse=True)
        return hits[:limit]
