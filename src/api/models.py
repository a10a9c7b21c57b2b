"""Pydantic request/response schemas for the transcript knowledge API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.extraction.models import Extraction
from src.ingestion.models import ParticipantInput, TranscriptInput
from src.pipeline_config import IngestionStage, IngestStatus, Sentiment


class ParticipantIn(BaseModel):
    """A meeting attendee in an ingest request."""

    name: str
    email: str = Field(min_length=3)
    role: str | None = None


class IngestRequest(BaseModel):
    """Request body for the /api/ingest endpoint."""

    transcript_id: str = Field(min_length=1)
    title: str
    occurred_at: datetime
    duration_minutes: int = Field(ge=0)
    participants: list[ParticipantIn] | None = None
    transcript: str
    metadata: dict[str, Any] | None = None

    def to_input(self) -> TranscriptInput:
        return TranscriptInput(
            transcript_id=self.transcript_id,
            title=self.title,
            occurred_at=self.occurred_at,
            duration_minutes=self.duration_minutes,
            transcript=self.transcript,
            participants=[
                ParticipantInput(name=p.name, email=p.email, role=p.role)
                for p in self.participants or []
            ],
            metadata=self.metadata,
        )


class IngestResponse(BaseModel):
    """Response body for /api/ingest and /api/ingest/{transcript_id}/resume.

    ``extracted`` and ``summary`` are only set when the transcript was
    processed by this request.
    """

    id: str
    status: IngestStatus
    stage: IngestionStage
    extracted: Extraction | None = None
    summary: str | None = None


class ParticipantOut(BaseModel):
    id: str
    name: str
    email: str
    role: str | None = None


class TranscriptRow(BaseModel):
    """Stored transcript columns (used in search hits)."""

    id: str
    transcript_id: str
    title: str
    occurred_at: datetime
    duration_minutes: int
    sentiment: Sentiment
    summary: str | None = None
    metadata: dict[str, Any] | None = None
    stage: IngestionStage = IngestionStage.CREATED
    created_at: datetime | None = None


class TranscriptDetail(TranscriptRow):
    """Transcript with its raw text, extracted entities, and participants."""

    transcript: str | None = None
    topics: list[str] = []
    action_items: list[str] = []
    decisions: list[str] = []
    participants: list[ParticipantOut] = []


class SearchResult(BaseModel):
    transcript: TranscriptRow
    score: float


class TopicCount(BaseModel):
    name: str
    count: int


class MeetingRef(BaseModel):
    id: str
    title: str
    occurred_at: datetime


class ParticipantEngagement(BaseModel):
    name: str
    email: str
    role: str | None = None
    meetings_count: int
    meetings: list[MeetingRef]


class SentimentPoint(BaseModel):
    date: str
    avg_sentiment_score: float


class Connection(BaseModel):
    person: str
    organization: str
    topics: list[str]
    interaction_count: int


class ConnectionsResponse(BaseModel):
    """Response body for the /api/graph/connections endpoint."""

    connections: list[Connection]
