"""Transcript endpoints: list and detail views."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import Services, get_services, processing_failure
from src.api.models import TranscriptDetail

logger = logging.getLogger(__name__)

router = APIRouter()

FAILURE_DETAIL = "Failed to load transcripts"


@router.get("/api/transcripts", response_model=list[TranscriptDetail])
def list_transcripts(
    services: Annotated[Services, Depends(get_services)],
) -> list[TranscriptDetail]:
    """List all transcripts with topics, actions, decisions, and participants."""
    try:
        rows = services.store.list_transcripts()
    except Exception as exc:
        logger.exception("Failed to list transcripts")
        raise processing_failure(exc, FAILURE_DETAIL) from exc
    return [TranscriptDetail.model_validate(t) for t in rows]


@router.get("/api/transcripts/{id}", response_model=TranscriptDetail)
def get_transcript(
    id: str,
    services: Annotated[Services, Depends(get_services)],
) -> TranscriptDetail:
    """Get one transcript by internal id, including its raw text."""
    try:
        transcript = services.store.get_transcript(id)
    except Exception as exc:
        logger.exception("Failed to load transcript %s", id)
        raise processing_failure(exc, FAILURE_DETAIL) from exc
    if transcript is None:
        raise HTTPException(status_code=404, detail="Transcript not found")
    return TranscriptDetail.model_validate(transcript)
