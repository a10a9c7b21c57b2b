"""End-to-end ingestion pipeline: dedupe -> extract -> store -> link -> embed -> summarize.

Each persisted stage advances the transcript's ``stage`` marker
(created -> embedded -> summarized -> complete). Nothing is rolled back when
a later stage fails; :meth:`IngestionPipeline.resume` finishes the remaining
stages explicitly.
"""

from __future__ import annotations

import logging
from typing import Any

from src.errors import DuplicateTranscriptError, TranscriptNotFoundError
from src.extraction.decoder import decode_extraction
from src.extraction.models import Extraction
from src.ingestion.models import IngestOutcome, TranscriptInput
from src.ingestion.participants import ParticipantResolver
from src.ingestion.storage import TranscriptStore
from src.pipeline_config import IngestionStage, IngestStatus
from src.understanding.gateway import LanguageGateway

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Sequences the ingestion stages for one transcript at a time."""

    def __init__(
        self,
        gateway: LanguageGateway,
        store: TranscriptStore,
        resolver: ParticipantResolver | None = None,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._resolver = resolver or ParticipantResolver(store)

    def ingest(self, request: TranscriptInput) -> IngestOutcome:
        """Run the full pipeline for a new transcript.

        A ``transcript_id`` seen before short-circuits to ``already_exists``
        without running any stage, even if the earlier run stopped part-way.

        Args:
            request: The caller's transcript payload.

        Returns:
            ``already_exists`` with the stored id, or ``processed`` with the
            extraction and summary.

        Raises:
            ProcessingError: A gateway or storage call failed after the
                transcript row may already have been written.
        """
        # 1. Idempotency check
        existing = self._store.find_transcript(request.transcript_id)
        if existing is not None:
            logger.info("Transcript %s already ingested; skipping", request.transcript_id)
            return _already_exists(existing)

        logger.info("Ingesting transcript %s (%s)", request.transcript_id, request.title)

        # 2. Extract (falls back to an empty extraction on malformed output)
        result = decode_extraction(self._gateway.extract(request.transcript))
        if result.is_fallback:
            logger.warning(
                "Extraction for %s fell back to empty structure: %s",
                request.transcript_id,
                result.error,
            )
        extraction = result.extraction

        # 3. Persist transcript + topics/actions/decisions in one write
        try:
            row = self._store.create_transcript(_transcript_record(request, extraction), extraction)
        except DuplicateTranscriptError:
            # Lost a race with a concurrent ingest of the same transcript_id.
            winner = self._store.find_transcript(request.transcript_id)
            if winner is None:
                raise
            logger.info("Transcript %s created concurrently; skipping", request.transcript_id)
            return _already_exists(winner)
        transcript_pk = str(row["id"])

        # 4. Participants, in order; the first failure aborts the request
        self._resolver.resolve_all(request.participants, transcript_pk)

        # 5-7. Embedding, summary, finalize
        summary = self._finish(transcript_pk, request.transcript, IngestionStage.CREATED)

        logger.info("Ingested + embedded + summarized: %s", request.title)
        return IngestOutcome(
            status=IngestStatus.PROCESSED,
            id=transcript_pk,
            stage=IngestionStage.COMPLETE,
            extracted=extraction,
            summary=summary,
        )

    def resume(self, transcript_id: str) -> IngestOutcome:
        """Complete the stages a stored transcript has not reached yet.

        Extraction and participant linking are not repeated; only embedding,
        summarization, and finalization run, using the stored raw text.

        Raises:
            TranscriptNotFoundError: No transcript has this ``transcript_id``.
        """
        row = self._store.find_transcript(transcript_id)
        if row is None:
            raise TranscriptNotFoundError(transcript_id)

        stage = IngestionStage(row.get("stage") or IngestionStage.CREATED)
        transcript_pk = str(row["id"])
        if stage is IngestionStage.COMPLETE:
            return IngestOutcome(
                status=IngestStatus.ALREADY_EXISTS,
                id=transcript_pk,
                stage=stage,
                summary=row.get("summary"),
            )

        logger.info("Resuming transcript %s from stage %s", transcript_id, stage.value)
        summary = self._finish(transcript_pk, row["transcript"], stage, row.get("summary"))
        return IngestOutcome(
            status=IngestStatus.PROCESSED,
            id=transcript_pk,
            stage=IngestionStage.COMPLETE,
            summary=summary,
        )

    def _finish(
        self,
        transcript_pk: str,
        text: str,
        stage: IngestionStage,
        summary: str | None = None,
    ) -> str | None:
        """Run every stage after ``stage``; returns the stored summary."""
        if not stage.reached(IngestionStage.EMBEDDED):
            vector = self._gateway.embed(text)
            self._store.save_embedding(transcript_pk, vector)
            self._advance(transcript_pk, IngestionStage.EMBEDDED)

        if not stage.reached(IngestionStage.SUMMARIZED):
            summary = self._gateway.summarize(text)
            self._advance(transcript_pk, IngestionStage.SUMMARIZED, summary=summary)

        self._advance(transcript_pk, IngestionStage.COMPLETE)
        return summary

    def _advance(self, transcript_pk: str, stage: IngestionStage, **fields: Any) -> None:
        self._store.update_transcript(transcript_pk, {**fields, "stage": stage.value})
        logger.info("Transcript %s reached stage %s", transcript_pk, stage.value)


def _transcript_record(request: TranscriptInput, extraction: Extraction) -> dict[str, Any]:
    return {
        "transcript_id": request.transcript_id,
        "title": request.title,
        "occurred_at": request.occurred_at.isoformat(),
        "duration_minutes": request.duration_minutes,
        "transcript": request.transcript,
        "sentiment": extraction.sentiment.value,
        "metadata": request.metadata,
        "stage": IngestionStage.CREATED.value,
    }


def _already_exists(row: dict[str, Any]) -> IngestOutcome:
    return IngestOutcome(
        status=IngestStatus.ALREADY_EXISTS,
        id=str(row["id"]),
        stage=IngestionStage(row.get("stage") or IngestionStage.CREATED),
    )
