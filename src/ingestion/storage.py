"""Supabase storage for transcripts, their extracted entities, participants, and embeddings.

Rows are exchanged as plain dicts shaped like the tables in
``supabase/schema.sql``. Nested reads flatten PostgREST embeds into simple
lists (``topics: list[str]``, ``participants: list[dict]``).
"""

from __future__ import annotations

import json
from typing import Any, Protocol, cast

import httpx
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from src.config import Settings
from src.errors import DuplicateTranscriptError, StorageError, StorageTimeoutError
from src.extraction.models import Extraction

# Postgres SQLSTATEs
UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"  # e.g. a malformed uuid

TRANSCRIPT_DETAIL_SELECT = (
    "*, topics(name), action_items(text), decisions(text), "
    "participant_transcripts(participants(id, name, email, role))"
)
PARTICIPANT_MEETINGS_SELECT = (
    "id, name, email, role, "
    "participant_transcripts(transcripts(id, title, occurred_at, topics(name)))"
)


class TranscriptStore(Protocol):
    """Record operations the pipeline, search engine, and analytics rely on."""

    def find_transcript(self, transcript_id: str) -> dict[str, Any] | None:
        """Look up a transcript row by its external ``transcript_id``."""
        ...

    def get_transcript(self, id: str) -> dict[str, Any] | None:
        """Transcript detail (with nested entities) by internal id."""
        ...

    def list_transcripts(self) -> list[dict[str, Any]]: ...

    def create_transcript(
        self, record: dict[str, Any], extraction: Extraction
    ) -> dict[str, Any]:
        """Insert a transcript and its topics/actions/decisions in one write.

        Raises:
            DuplicateTranscriptError: ``transcript_id`` is already taken.
        """
        ...

    def update_transcript(self, id: str, fields: dict[str, Any]) -> None: ...

    def upsert_participant(self, name: str, email: str, role: str | None) -> dict[str, Any]:
        """Insert-if-absent by email and return the stored participant row."""
        ...

    def link_participant(self, participant_id: str, transcript_pk: str) -> None: ...

    def save_embedding(self, transcript_pk: str, vector: list[float]) -> None: ...

    def list_embeddings(self) -> list[dict[str, Any]]:
        """Every stored embedding as ``{"vector": [...], "transcript": {...}}``."""
        ...

    def list_topic_names(self) -> list[str]: ...

    def list_participants(self) -> list[dict[str, Any]]:
        """Participants with ``meetings: [{id, title, occurred_at, topics}]``."""
        ...

    def list_transcript_sentiments(self) -> list[dict[str, Any]]: ...


def get_supabase_client(settings: Settings) -> Client:
    """Create a Supabase client whose PostgREST calls honour the request timeout."""
    return create_client(
        settings.supabase_url,
        settings.supabase_key,
        options=ClientOptions(postgrest_client_timeout=settings.request_timeout_s),
    )


def _execute(query: Any) -> Any:
    """Run a PostgREST request builder, translating transport/API failures."""
    try:
        return query.execute()
    except APIError as exc:
        raise StorageError(f"storage request failed: {exc.message}", code=exc.code) from exc
    except httpx.TimeoutException as exc:
        raise StorageTimeoutError("storage request timed out") from exc
    except httpx.HTTPError as exc:
        raise StorageError(f"storage request failed: {exc}") from exc


def _parse_vector(raw: Any) -> list[float]:
    # pgvector columns come back from PostgREST as "[0.1,0.2,...]" strings.
    if isinstance(raw, str):
        raw = json.loads(raw)
    return [float(v) for v in raw]


def _flatten_transcript(row: dict[str, Any]) -> dict[str, Any]:
    """Turn PostgREST embeds into plain lists on a transcript row."""
    flat = {
        k: v
        for k, v in row.items()
        if k not in ("topics", "action_items", "decisions", "participant_transcripts")
    }
    flat["topics"] = [t["name"] for t in row.get("topics") or []]
    flat["action_items"] = [a["text"] for a in row.get("action_items") or []]
    flat["decisions"] = [d["text"] for d in row.get("decisions") or []]
    flat["participants"] = [
        link["participants"]
        for link in row.get("participant_transcripts") or []
        if link.get("participants")
    ]
    return flat


class SupabaseTranscriptStore:
    """:class:`TranscriptStore` over Supabase tables and RPC functions."""

    def __init__(self, client: Client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseTranscriptStore:
        return cls(get_supabase_client(settings))

    # -- transcripts -------------------------------------------------------

    def find_transcript(self, transcript_id: str) -> dict[str, Any] | None:
        result = _execute(
            self._client.table("transcripts").select("*").eq("transcript_id", transcript_id)
        )
        rows = cast(list[dict[str, Any]], result.data)
        return rows[0] if rows else None

    def get_transcript(self, id: str) -> dict[str, Any] | None:
        try:
            result = _execute(
                self._client.table("transcripts").select(TRANSCRIPT_DETAIL_SELECT).eq("id", id)
            )
        except StorageError as exc:
            # An id that is not a uuid cannot match any row.
            if exc.code == INVALID_TEXT_REPRESENTATION:
                return None
            raise
        rows = cast(list[dict[str, Any]], result.data)
        return _flatten_transcript(rows[0]) if rows else None

    def list_transcripts(self) -> list[dict[str, Any]]:
        result = _execute(
            self._client.table("transcripts")
            .select(TRANSCRIPT_DETAIL_SELECT)
            .order("occurred_at", desc=True)
        )
        return [_flatten_transcript(r) for r in cast(list[dict[str, Any]], result.data)]

    def create_transcript(
        self, record: dict[str, Any], extraction: Extraction
    ) -> dict[str, Any]:
        # One RPC call so the transcript and its children commit together.
        params = {
            "p_transcript": record,
            "p_topics": extraction.topics,
            "p_action_items": extraction.action_items,
            "p_decisions": extraction.decisions,
        }
        try:
            result = _execute(self._client.rpc("create_transcript_with_entities", params))
        except StorageError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateTranscriptError(record["transcript_id"]) from exc
            raise

        data = result.data
        if isinstance(data, list):
            if not data:
                raise StorageError("create_transcript_with_entities returned no row")
            data = data[0]
        return cast(dict[str, Any], data)

    def update_transcript(self, id: str, fields: dict[str, Any]) -> None:
        _execute(self._client.table("transcripts").update(fields).eq("id", id))

    # -- participants ------------------------------------------------------

    def upsert_participant(self, name: str, email: str, role: str | None) -> dict[str, Any]:
        # ON CONFLICT (email) DO NOTHING: an existing record keeps its name/role.
        _execute(
            self._client.table("participants").upsert(
                {"name": name, "email": email, "role": role},
                on_conflict="email",
                ignore_duplicates=True,
            )
        )
        result = _execute(self._client.table("participants").select("*").eq("email", email))
        rows = cast(list[dict[str, Any]], result.data)
        if not rows:
            raise StorageError(f"participant {email} missing after upsert")
        return rows[0]

    def link_participant(self, participant_id: str, transcript_pk: str) -> None:
        _execute(
            self._client.table("participant_transcripts").upsert(
                {"participant_id": participant_id, "transcript_id": transcript_pk},
                on_conflict="participant_id,transcript_id",
                ignore_duplicates=True,
            )
        )

    def list_participants(self) -> list[dict[str, Any]]:
        result = _execute(
            self._client.table("participants").select(PARTICIPANT_MEETINGS_SELECT).order("name")
        )
        participants: list[dict[str, Any]] = []
        for row in cast(list[dict[str, Any]], result.data):
            meetings = []
            for link in row.get("participant_transcripts") or []:
                t = link.get("transcripts")
                if not t:
                    continue
                meetings.append(
                    {
                        "id": t["id"],
                        "title": t["title"],
                        "occurred_at": t["occurred_at"],
                        "topics": [topic["name"] for topic in t.get("topics") or []],
                    }
                )
            participants.append(
                {
                    "id": row["id"],
                    "name": row["name"],
                    "email": row["email"],
                    "role": row.get("role"),
                    "meetings": meetings,
                }
            )
        return participants

    # -- embeddings --------------------------------------------------------

    def save_embedding(self, transcript_pk: str, vector: list[float]) -> None:
        _execute(
            self._client.table("embeddings").upsert(
                {"transcript_id": transcript_pk, "vector": vector},
                on_conflict="transcript_id",
            )
        )

    def list_embeddings(self) -> list[dict[str, Any]]:
        result = _execute(
            self._client.table("embeddings").select("vector, transcripts(*)").order("created_at")
        )
        return [
            {"vector": _parse_vector(row["vector"]), "transcript": row["transcripts"]}
            for row in cast(list[dict[str, Any]], result.data)
            if row.get("transcripts")
        ]

    # -- analytics reads ---------------------------------------------------

    def list_topic_names(self) -> list[str]:
        result = _execute(self._client.table("topics").select("name").order("created_at"))
        return [r["name"] for r in cast(list[dict[str, Any]], result.data)]

    def list_transcript_sentiments(self) -> list[dict[str, Any]]:
        result = _execute(
            self._client.table("transcripts")
            .select("occurred_at, sentiment")
            .order("occurred_at")
        )
        return cast(list[dict[str, Any]], result.data)
