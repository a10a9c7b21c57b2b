"""Search endpoint: semantic top-k retrieval over ingested transcripts."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import Services, get_services, processing_failure
from src.api.models import SearchResult, TranscriptRow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/search", response_model=list[SearchResult])
def search(
    services: Annotated[Services, Depends(get_services)],
    q: str | None = None,
) -> list[SearchResult]:
    """Return the transcripts most similar to ``q`` (top 5 by default)."""
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing ?q=")

    try:
        hits = services.search_engine.search(q)
    except Exception as exc:
        logger.exception("Search failed for query %r", q)
        raise processing_failure(exc, "Search failed") from exc

    return [
        SearchResult(transcript=TranscriptRow.model_validate(h.transcript), score=h.score)
        for h in hits
    ]
