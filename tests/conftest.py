"""Shared fixtures wiring the in-memory store and fake gateway into the app."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from src.api.deps import Services, get_services, wire_services
from src.api.main import app
from tests.fakes import FakeGateway, InMemoryTranscriptStore


@pytest.fixture
def store() -> InMemoryTranscriptStore:
    return InMemoryTranscriptStore()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def services(gateway: FakeGateway, store: InMemoryTranscriptStore) -> Services:
    return wire_services(gateway, store)


@pytest.fixture
def client(services: Services):  # type: ignore[no-untyped-def]
    """TestClient whose routes use the in-memory store and fake gateway."""
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
