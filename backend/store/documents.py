from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from pathlib import Path

import pandas as pd

from ..rankings.errors import RestaurantNotFoundError, StoreUnavailableError
from ..rankings.models import Comment, Restaurant, SentimentAnalysis, utcnow
from .config import DEFAULT_STORE_CONFIG, StoreConfig

logger = logging.getLogger(__name__)


def _contains(value: str | None, pattern: str | None) -> bool:
    """Case-insensitive, unanchored substring match. No pattern matches everything."""
    if not pattern:
        return True
    if value is None:
        return False
    return pattern.lower() in value.lower()


def _new_id() -> str:
    return uuid.uuid4().hex


class DocumentStore:
    """In-memory Restaurant and Comment collections.

    The application opens one store at startup and closes it at shutdown.
    Reads return copies, so a ranking computed while a comment is being
    written sees either the old or the new comment set, never a torn one.
    """

    def __init__(self, config: StoreConfig = DEFAULT_STORE_CONFIG) -> None:
        self._config = config
        self._restaurants: dict[str, Restaurant] = {}
        self._comments: list[Comment] = []
        self._lock = threading.RLock()
        self._is_open = False

    # ── Lifecycle ────────────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        with self._lock:
            if self._is_open:
                return
            if self._config.seed_on_open:
                self._seed(self._config.seed_path)
            self._is_open = True
        logger.info("Document store opened with %d restaurants", len(self._restaurants))

    def close(self) -> None:
        with self._lock:
            self._restaurants.clear()
            self._comments.clear()
            self._is_open = False
        logger.info("Document store closed")

    def _require_open(self) -> None:
        if not self._is_open:
            raise StoreUnavailableError("Document store is not open")

    def _seed(self, path: Path) -> None:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
        for row in df.to_dict("records"):
            restaurant = Restaurant(
                id=row["id"],
                name=row["name"],
                location=row["location"] or None,
                cuisine=row["cuisine"],
                created_at=row["created_at"].to_pydatetime(),
            )
            self._restaurants[restaurant.id] = restaurant
        logger.debug("Seeded %d restaurants from %s", len(df), path)

    # ── Restaurants ──────────────────────────────────────────────────────

    def find_all(self) -> list[Restaurant]:
        with self._lock:
            self._require_open()
            return [r.model_copy(deep=True) for r in self._restaurants.values()]

    def find_matching(
        self,
        cuisine: str | None = None,
        location: str | None = None,
    ) -> list[Restaurant]:
        with self._lock:
            self._require_open()
            return [
                r.model_copy(deep=True)
                for r in self._restaurants.values()
                if _contains(r.cuisine, cuisine) and _contains(r.location, location)
            ]

    def get_restaurant(self, restaurant_id: str) -> Restaurant:
        with self._lock:
            self._require_open()
            restaurant = self._restaurants.get(restaurant_id)
            if restaurant is None:
                raise RestaurantNotFoundError()
            return restaurant.model_copy(deep=True)

    def add_restaurant(
        self,
        name: str,
        cuisine: str,
        location: str | None = None,
        created_at: datetime | None = None,
        restaurant_id: str | None = None,
    ) -> Restaurant:
        restaurant = Restaurant(
            id=restaurant_id or _new_id(),
            name=name,
            location=location,
            cuisine=cuisine,
            created_at=created_at or utcnow(),
        )
        with self._lock:
            self._require_open()
            self._restaurants[restaurant.id] = restaurant
        return restaurant.model_copy(deep=True)

    # ── Comments ─────────────────────────────────────────────────────────

    def find_by_restaurant(self, restaurant_id: str) -> list[Comment]:
        with self._lock:
            self._require_open()
            return [c for c in self._comments if c.restaurant == restaurant_id]

    def count_by_restaurant(self, restaurant_id: str) -> int:
        with self._lock:
            self._require_open()
            return sum(1 for c in self._comments if c.restaurant == restaurant_id)

    def add_comment(
        self,
        content: str,
        user: str,
        restaurant_id: str,
        sentiment: SentimentAnalysis | None = None,
        created_at: datetime | None = None,
    ) -> Comment:
        comment = Comment(
            id=_new_id(),
            content=content,
            user=user,
            restaurant=restaurant_id,
            sentiment_analysis=sentiment or SentimentAnalysis(),
            created_at=created_at or utcnow(),
        )
        with self._lock:
            self._require_open()
            restaurant = self._restaurants.get(restaurant_id)
            if restaurant is None:
                raise RestaurantNotFoundError()
            self._comments.append(comment)
            restaurant.comments.append(comment.id)
        return comment
