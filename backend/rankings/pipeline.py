"""
Ranking pipeline stages.

Each stage is a small function over an in-memory sequence:

    match -> join -> derive -> filter -> sort -> paginate -> rank

Only ``match_restaurants`` and ``join_comments`` touch the store; the rest
are pure.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from operator import attrgetter
from typing import Any, Callable, Protocol, Sequence

from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .errors import InvalidQueryError
from .models import (
    Comment,
    PaginationInfo,
    RankedRestaurant,
    Restaurant,
    SortOrder,
)
from .scoring import compute_metrics

SortKey = Callable[[RankedRestaurant], Any]

_NO_ACTIVITY = datetime.min.replace(tzinfo=timezone.utc)


def _recent_activity(r: RankedRestaurant) -> tuple[bool, datetime]:
    # Restaurants without comments order below any that have activity.
    return r.recent_activity is not None, r.recent_activity or _NO_ACTIVITY


SORT_FIELDS: dict[str, SortKey] = {
    "overallScore": attrgetter("overall_score"),
    "avgSentimentScore": attrgetter("avg_sentiment_score"),
    "totalComments": attrgetter("total_comments"),
    "positiveComments": attrgetter("positive_comments"),
    "negativeComments": attrgetter("negative_comments"),
    "neutralComments": attrgetter("neutral_comments"),
    "positivePercentage": attrgetter("positive_percentage"),
    "negativePercentage": attrgetter("negative_percentage"),
    "name": attrgetter("name"),
    "createdAt": attrgetter("created_at"),
    "recentActivity": _recent_activity,
}


class RestaurantReader(Protocol):
    def find_matching(
        self, cuisine: str | None = None, location: str | None = None,
    ) -> list[Restaurant]: ...

    def find_all(self) -> list[Restaurant]: ...

    def find_by_restaurant(self, restaurant_id: str) -> list[Comment]: ...

    def count_by_restaurant(self, restaurant_id: str) -> int: ...


def resolve_sort_key(sort_by: str) -> SortKey:
    try:
        return SORT_FIELDS[sort_by]
    except KeyError:
        allowed = ", ".join(SORT_FIELDS)
        raise InvalidQueryError(
            f"Unknown sortBy field '{sort_by}'. Allowed fields: {allowed}"
        ) from None


# ── Stages ───────────────────────────────────────────────────────────────


def match_restaurants(
    store: RestaurantReader,
    cuisine: str | None = None,
    location: str | None = None,
) -> list[Restaurant]:
    if cuisine or location:
        return store.find_matching(cuisine=cuisine, location=location)
    return store.find_all()


def join_comments(
    restaurants: Sequence[Restaurant],
    store: RestaurantReader,
) -> list[tuple[Restaurant, list[Comment]]]:
    return [(r, store.find_by_restaurant(r.id)) for r in restaurants]


def derive_metrics(
    joined: Sequence[tuple[Restaurant, Sequence[Comment]]],
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> list[RankedRestaurant]:
    """Attach metrics to each restaurant and drop the comment lists."""
    ranked: list[RankedRestaurant] = []
    for restaurant, comments in joined:
        metrics = compute_metrics(comments, config)
        ranked.append(RankedRestaurant(
            **restaurant.model_dump(exclude={"comments"}),
            **metrics.model_dump(),
        ))
    return ranked


def filter_min_comments(
    items: Sequence[RankedRestaurant], min_comments: int,
) -> list[RankedRestaurant]:
    return [r for r in items if r.total_comments >= min_comments]


def sort_ranked(
    items: Sequence[RankedRestaurant],
    key: SortKey,
    order: SortOrder = SortOrder.desc,
) -> list[RankedRestaurant]:
    # sorted() is stable in both directions: ties keep their incoming order.
    return sorted(items, key=key, reverse=order == SortOrder.desc)


def paginate(items: Sequence[RankedRestaurant], page: int, limit: int) -> list[RankedRestaurant]:
    start = (page - 1) * limit
    return list(items[start:start + limit])


def assign_ranks(items: Sequence[RankedRestaurant], offset: int = 0) -> list[RankedRestaurant]:
    return [
        item.model_copy(update={"rank_position": offset + index + 1})
        for index, item in enumerate(items)
    ]


def build_pagination(total: int, page: int, limit: int) -> PaginationInfo:
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return PaginationInfo(
        current_page=page,
        total_pages=total_pages,
        total_restaurants=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
