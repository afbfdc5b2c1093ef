from __future__ import annotations

from datetime import date
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from scout.lookup import ApplicantLookupService
from scout.main import app, get_lookup_service, get_session_store
from scout.sessions import SessionStore

from fakes import FakeGeminiClient


@pytest.fixture
def fake_client() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture
def make_service() -> Callable[[FakeGeminiClient], ApplicantLookupService]:
    def _make(client: FakeGeminiClient) -> ApplicantLookupService:
        return ApplicantLookupService(
            client,
            redirector_marker="vertexaisearch.cloud.google.com",
            image_base="https://picsum.photos/seed",
            today=lambda: date(2026, 3, 15),
        )

    return _make


@pytest.fixture
def service(fake_client, make_service) -> ApplicantLookupService:
    return make_service(fake_client)


@pytest.fixture
def client(service):
    store = SessionStore()
    app.dependency_overrides[get_lookup_service] = lambda: service
    app.dependency_overrides[get_session_store] = lambda: store
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()
