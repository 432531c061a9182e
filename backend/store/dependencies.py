from __future__ import annotations

from fastapi import Request

from ..rankings.errors import StoreUnavailableError
from .documents import DocumentStore


def get_store(request: Request) -> DocumentStore:
    """Return the store opened by the application lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None or not store.is_open:
        raise StoreUnavailableError("Document store is not open")
    return store
