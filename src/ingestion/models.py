"""Data models for the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.extraction.models import Extraction
from src.pipeline_config import IngestionStage, IngestStatus


@dataclass
class ParticipantInput:
    """An attendee as supplied by the caller."""

    name: str
    email: str
    role: str | None = None


@dataclass
class TranscriptInput:
    """Everything a caller submits to ingest one meeting transcript."""

    transcript_id: str
    title: str
    occurred_at: datetime
    duration_minutes: int
    transcript: str
    participants: list[ParticipantInput] = field(default_factory=list)
    metadata: dict[str, Any] | None = None


@dataclass
class IngestOutcome:
    """Result of an ingest (or resume) call.

    ``extracted`` and ``summary`` are only populated for freshly processed
    transcripts.
    """

    status: IngestStatus
    id: str
    stage: IngestionStage
    extracted: Extraction | None = None
    summary: str | None = None
