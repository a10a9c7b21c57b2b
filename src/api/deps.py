"""Service wiring: build the gateway, store, and engines once and inject them."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, Request

from src.analytics.aggregators import Analytics
from src.config import Settings, get_settings
from src.errors import ProcessingError
from src.ingestion.pipeline import IngestionPipeline
from src.ingestion.storage import SupabaseTranscriptStore, TranscriptStore
from src.pipeline_config import PipelineConfig
from src.retrieval.search import SearchEngine
from src.understanding.gateway import LanguageGateway, LLMGateway


@dataclass
class Services:
    """Everything the route handlers need, constructed at startup."""

    gateway: LanguageGateway
    store: TranscriptStore
    pipeline: IngestionPipeline
    search_engine: SearchEngine
    analytics: Analytics


def wire_services(
    gateway: LanguageGateway,
    store: TranscriptStore,
    config: PipelineConfig | None = None,
) -> Services:
    """Assemble :class:`Services` around an existing gateway and store."""
    return Services(
        gateway=gateway,
        store=store,
        pipeline=IngestionPipeline(gateway, store),
        search_engine=SearchEngine(gateway, store, config),
        analytics=Analytics(store),
    )


def build_services(settings: Settings) -> Services:
    """Create the production gateway/store from settings and wire them."""
    return wire_services(
        LLMGateway.from_settings(settings),
        SupabaseTranscriptStore.from_settings(settings),
        PipelineConfig.from_settings(settings),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's :class:`Services`."""
    services: Services | None = getattr(request.app.state, "services", None)
    if services is None:
        # Lifespan did not run (e.g. a bare TestClient); build on first use.
        services = build_services(get_settings())
        request.app.state.services = services
    return services


# Client-facing messages carry no internal detail; the cause is logged by the route.
RETRYABLE_DETAIL = "Service temporarily unavailable, retry later"


def processing_failure(exc: Exception, detail: str) -> HTTPException:
    """Map an unhandled failure to a generic 500, or 503 if it is retryable."""
    if isinstance(exc, ProcessingError) and exc.retryable:
        return HTTPException(status_code=503, detail=RETRYABLE_DETAIL)
    return HTTPException(status_code=500, detail=detail)
