from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from src.api.deps import build_services
from src.api.routes.analytics import router as analytics_router
from src.api.routes.graph import router as graph_router
from src.api.routes.ingest import router as ingest_router
from src.api.routes.search import router as search_router
from src.api.routes.transcripts import router as transcripts_router
from src.config import get_settings
from src.logging_utils import configure_logging, request_context


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level)
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
    yield


app = FastAPI(
    title="Meeting Transcript Knowledge API",
    description="Transcript ingestion, entity extraction, analytics, and semantic search",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    with request_context(request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(ingest_router)
app.include_router(transcripts_router)
app.include_router(analytics_router)
app.include_router(graph_router)
app.include_router(search_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
