"""Analytics endpoints: topic frequency, participant engagement, sentiment trend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from src.api.deps import Services, get_services, processing_failure
from src.api.models import ParticipantEngagement, SentimentPoint, TopicCount

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics")

FAILURE_DETAIL = "Failed to compute analytics"


def _rollup(name: str, compute: Callable[[], list[dict[str, Any]]]) -> list[dict[str, Any]]:
    try:
        return compute()
    except Exception as exc:
        logger.exception("Analytics %s failed", name)
        raise processing_failure(exc, FAILURE_DETAIL) from exc


@router.get("/topics", response_model=list[TopicCount])
def topics(services: Annotated[Services, Depends(get_services)]) -> list[TopicCount]:
    """Topics across all transcripts, most frequent first."""
    return [TopicCount(**row) for row in _rollup("topics", services.analytics.topics)]


@router.get("/participants", response_model=list[ParticipantEngagement])
def participants(
    services: Annotated[Services, Depends(get_services)],
) -> list[ParticipantEngagement]:
    """Meeting count and meeting list per participant."""
    rows = _rollup("participants", services.analytics.participants)
    return [ParticipantEngagement.model_validate(row) for row in rows]


@router.get("/sentiment", response_model=list[SentimentPoint])
def sentiment(services: Annotated[Services, Depends(get_services)]) -> list[SentimentPoint]:
    """Daily average sentiment score (positive=1, neutral=0.5, negative=0)."""
    return [SentimentPoint(**row) for row in _rollup("sentiment", services.analytics.sentiment)]
