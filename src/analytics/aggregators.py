"""Read-only rollups over stored transcripts, topics, and participants."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, date, datetime
from typing import Any

from src.ingestion.storage import TranscriptStore
from src.pipeline_config import SENTIMENT_SCORES, Sentiment


def _as_date(value: str | datetime) -> date:
    """Calendar date (UTC) of a timestamp given as ISO string or datetime."""
    ts = datetime.fromisoformat(value) if isinstance(value, str) else value
    if ts.tzinfo is not None:
        ts = ts.astimezone(UTC)
    return ts.date()


def topic_frequency(topic_names: list[str]) -> list[dict[str, Any]]:
    """Count topics by exact name, most frequent first.

    Ties keep the order in which a name was first seen.
    """
    counts = Counter(topic_names)
    return [{"name": name, "count": count} for name, count in counts.most_common()]


def participant_engagement(participants: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Per participant: how many transcripts they are linked to, and which."""
    return [
        {
            "name": p["name"],
            "email": p["email"],
            "role": p.get("role"),
            "meetings_count": len(p["meetings"]),
            "meetings": [
                {"id": m["id"], "title": m["title"], "occurred_at": m["occurred_at"]}
                for m in p["meetings"]
            ],
        }
        for p in participants
    ]


def sentiment_trend(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Average sentiment score per calendar day, oldest day first.

    positive=1, neutral=0.5, negative=0; means are rounded to 2 decimals.
    """
    totals: dict[date, list[float]] = {}
    for row in rows:
        day = _as_date(row["occurred_at"])
        score = SENTIMENT_SCORES[Sentiment(row["sentiment"])]
        totals.setdefault(day, []).append(score)

    return [
        {"date": day.isoformat(), "avg_sentiment_score": round(sum(scores) / len(scores), 2)}
        for day, scores in sorted(totals.items())
    ]


def graph_connections(participants: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Person -> organization (email domain) and the topics of their meetings."""
    connections = []
    for p in participants:
        topics: dict[str, None] = {}  # ordered set
        for meeting in p["meetings"]:
            for topic in meeting.get("topics", []):
                topics.setdefault(topic, None)
        _, at, domain = p["email"].partition("@")
        connections.append(
            {
                "person": p["name"],
                "organization": domain if at and domain else "Unknown",
                "topics": list(topics),
                "interaction_count": len(p["meetings"]),
            }
        )
    return connections


class Analytics:
    """Store-backed entry points for the analytics and graph endpoints."""

    def __init__(self, store: TranscriptStore) -> None:
        self._store = store

    def topics(self) -> list[dict[str, Any]]:
        return topic_frequency(self._store.list_topic_names())

    def participants(self) -> list[dict[str, Any]]:
        return participant_engagement(self._store.list_participants())

    def sentiment(self) -> list[dict[str, Any]]:
        return sentiment_trend(self._store.list_transcript_sentiments())

    def connections(self) -> list[dict[str, Any]]:
        return graph_connections(self._store.list_participants())
