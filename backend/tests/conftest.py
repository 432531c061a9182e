from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from backend.app import app
from backend.llm.groq_client import build_analysis
from backend.store.config import StoreConfig
from backend.store.dependencies import get_store
from backend.store.documents import DocumentStore

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def empty_store():
    store = DocumentStore(StoreConfig(seed_on_open=False))
    store.open()
    yield store
    store.close()


@pytest.fixture
def seeded_store():
    store = DocumentStore()
    store.open()
    yield store
    store.close()


@pytest.fixture
def add_comments():
    """Attach one comment per score to a restaurant, ``days_ago`` before ``now``."""

    def _add(
        store: DocumentStore,
        restaurant_id: str,
        scores: list[float],
        days_ago: float = 1.0,
        now: datetime = NOW,
    ):
        created = now - timedelta(days=days_ago)
        return [
            store.add_comment(
                f"comment {i}",
                "user-1",
                restaurant_id,
                sentiment=build_analysis(score),
                created_at=created + timedelta(seconds=i),
            )
            for i, score in enumerate(scores)
        ]

    return _add


def _client_for(store: DocumentStore):
    app.dependency_overrides[get_store] = lambda: store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def client(seeded_store):
    yield from _client_for(seeded_store)


@pytest.fixture
def empty_client(empty_store):
    yield from _client_for(empty_store)
