"""Ingest endpoints: process a meeting transcript, or resume a stranded one."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import Services, get_services, processing_failure
from src.api.models import IngestRequest, IngestResponse
from src.errors import TranscriptNotFoundError
from src.ingestion.models import IngestOutcome

logger = logging.getLogger(__name__)

router = APIRouter()

FAILURE_DETAIL = "Failed to process transcript"


def _to_response(outcome: IngestOutcome) -> IngestResponse:
    return IngestResponse(
        id=outcome.id,
        status=outcome.status,
        stage=outcome.stage,
        extracted=outcome.extracted,
        summary=outcome.summary,
    )


@router.post("/api/ingest", response_model=IngestResponse)
def ingest(
    request: IngestRequest,
    services: Annotated[Services, Depends(get_services)],
) -> IngestResponse:
    """Extract entities, store, embed, and summarize a meeting transcript.

    Re-submitting a known ``transcript_id`` returns ``already_exists`` and
    runs nothing. If a stage fails after the transcript was stored, the
    stored row is kept (see ``/api/ingest/{transcript_id}/resume``).
    """
    try:
        outcome = services.pipeline.ingest(request.to_input())
    except Exception as exc:
        logger.exception("Ingestion error for transcript %s", request.transcript_id)
        raise processing_failure(exc, FAILURE_DETAIL) from exc
    return _to_response(outcome)


@router.post("/api/ingest/{transcript_id}/resume", response_model=IngestResponse)
def resume_ingest(
    transcript_id: str,
    services: Annotated[Services, Depends(get_services)],
) -> IngestResponse:
    """Finish the embedding/summary stages of a partially ingested transcript."""
    try:
        outcome = services.pipeline.resume(transcript_id)
    except TranscriptNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Transcript not found") from exc
    except Exception as exc:
        logger.exception("Resume error for transcript %s", transcript_id)
        raise processing_failure(exc, FAILURE_DETAIL) from exc
    return _to_response(outcome)
