"""Graph endpoint: participant -> organization/topic connections."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.deps import Services, get_services, processing_failure
from src.api.models import Connection, ConnectionsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/graph/connections", response_model=ConnectionsResponse)
def connections(services: Annotated[Services, Depends(get_services)]) -> ConnectionsResponse:
    """For each participant: organization (email domain), topics, and meeting count."""
    try:
        rows = services.analytics.connections()
    except Exception as exc:
        logger.exception("Graph connections failed")
        raise processing_failure(exc, "Failed to build graph connections") from exc
    return ConnectionsResponse(connections=[Connection(**row) for row in rows])
