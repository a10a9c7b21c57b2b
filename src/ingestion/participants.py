"""Participant resolution: upsert a person by email and link them to a transcript."""

from __future__ import annotations

import logging
from typing import Any

from src.ingestion.models import ParticipantInput
from src.ingestion.storage import TranscriptStore

logger = logging.getLogger(__name__)


class ParticipantResolver:
    """Binds meeting attendees to a transcript, creating people lazily.

    Email is the identity. The store's upsert is atomic
    (``ON CONFLICT (email) DO NOTHING``), so two ingestions sharing a new
    attendee can interleave freely without creating duplicates. An existing
    record is reused as-is, even if this payload carries a different name
    or role.
    """

    def __init__(self, store: TranscriptStore) -> None:
        self._store = store

    def resolve(self, participant: ParticipantInput, transcript_pk: str) -> dict[str, Any]:
        """Ensure the participant exists and link them to ``transcript_pk``.

        Returns:
            The stored participant row.
        """
        row = self._store.upsert_participant(
            name=participant.name,
            email=participant.email,
            role=participant.role,
        )
        self._store.link_participant(row["id"], transcript_pk)
        logger.debug("Linked participant %s to transcript %s", participant.email, transcript_pk)
        return row

    def resolve_all(
        self, participants: list[ParticipantInput], transcript_pk: str
    ) -> list[dict[str, Any]]:
        """Resolve participants one after another; the first failure propagates."""
        return [self.resolve(p, transcript_pk) for p in participants]
