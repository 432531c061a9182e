from __future__ import annotations

import math
from operator import attrgetter
from typing import Sequence

import pandas as pd

from ..rankings.config import DEFAULT_RANKING_CONFIG
from ..rankings.models import Comment, RestaurantOut
from ..rankings.pipeline import build_pagination, match_restaurants
from ..store.documents import DocumentStore
from .models import (
    CommentsPagination,
    RestaurantDetailData,
    RestaurantListData,
    RestaurantSummary,
    SentimentStat,
)


def list_restaurants(
    store: DocumentStore,
    page: int = 1,
    limit: int = DEFAULT_RANKING_CONFIG.default_browse_page_size,
    cuisine: str | None = None,
) -> RestaurantListData:
    """Restaurants newest first, one page at a time, with comment counts."""
    restaurants = sorted(
        match_restaurants(store, cuisine=cuisine),
        key=attrgetter("created_at"),
        reverse=True,
    )
    start = (page - 1) * limit
    items = [
        RestaurantSummary(
            **r.model_dump(exclude={"comments"}),
            comment_count=store.count_by_restaurant(r.id),
        )
        for r in restaurants[start:start + limit]
    ]
    return RestaurantListData(
        restaurants=items,
        pagination=build_pagination(len(restaurants), page, limit),
    )


def sentiment_stats(comments: Sequence[Comment]) -> list[SentimentStat]:
    """Comment count and average score per sentiment label."""
    if not comments:
        return []

    df = pd.DataFrame([
        {"label": c.sentiment_analysis.label.value, "score": c.sentiment_analysis.score}
        for c in comments
    ])
    grouped = df.groupby("label").agg(
        count=("score", "size"),
        avg_score=("score", "mean"),
    )
    return [
        SentimentStat(label=label, count=int(row["count"]), avg_score=float(row["avg_score"]))
        for label, row in grouped.iterrows()
    ]


def get_restaurant_detail(
    store: DocumentStore,
    restaurant_id: str,
    include_comments: bool = False,
    page: int = 1,
    limit: int = DEFAULT_RANKING_CONFIG.default_comments_page_size,
) -> RestaurantDetailData:
    restaurant = store.get_restaurant(restaurant_id)
    comments = store.find_by_restaurant(restaurant_id)

    detail = RestaurantDetailData(
        restaurant=RestaurantOut(**restaurant.model_dump(exclude={"comments"})),
        sentiment_stats=sentiment_stats(comments),
    )

    if include_comments:
        newest = sorted(comments, key=attrgetter("created_at"), reverse=True)
        start = (page - 1) * limit
        total_pages = math.ceil(len(newest) / limit)
        detail.comments = newest[start:start + limit]
        detail.comments_pagination = CommentsPagination(
            current_page=page,
            total_pages=total_pages,
            total_comments=len(newest),
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    return detail
