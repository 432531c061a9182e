from __future__ import annotations

from typing import Sequence

import pandas as pd

from ..rankings.config import DEFAULT_RANKING_CONFIG, RankingConfig
from ..rankings.models import (
    CuisineStats,
    OverallStats,
    RankedRestaurant,
    RankingStatsData,
)
from ..rankings.pipeline import RestaurantReader, derive_metrics, join_comments


def compute_overall_stats(items: Sequence[RankedRestaurant]) -> OverallStats:
    if not items:
        return OverallStats()

    totals = pd.Series([r.total_comments for r in items], dtype="int64")
    return OverallStats(
        total_restaurants=len(totals),
        restaurants_with_reviews=int((totals > 0).sum()),
        total_comments=int(totals.sum()),
        avg_comments_per_restaurant=float(totals.mean()),
    )


def compute_cuisine_rankings(items: Sequence[RankedRestaurant]) -> list[CuisineStats]:
    """Group restaurants by cuisine, best average sentiment first.

    ``avgSentimentScore`` is the mean of each restaurant's own average, so a
    heavily reviewed restaurant weighs the same as a lightly reviewed one.
    """
    if not items:
        return []

    df = pd.DataFrame([
        {
            "cuisine": r.cuisine,
            "total_comments": r.total_comments,
            "avg_sentiment_score": r.avg_sentiment_score,
        }
        for r in items
    ])
    grouped = (
        df.groupby("cuisine", sort=False)
        .agg(
            restaurant_count=("total_comments", "size"),
            total_comments=("total_comments", "sum"),
            avg_sentiment_score=("avg_sentiment_score", "mean"),
        )
        .reset_index()
        .sort_values("avg_sentiment_score", ascending=False, kind="stable")
    )

    return [
        CuisineStats(
            cuisine=row.cuisine,
            restaurant_count=int(row.restaurant_count),
            total_comments=int(row.total_comments),
            avg_sentiment_score=float(row.avg_sentiment_score),
        )
        for row in grouped.itertuples(index=False)
    ]


def get_ranking_stats(
    store: RestaurantReader,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> RankingStatsData:
    items = derive_metrics(join_comments(store.find_all(), store), config)
    return RankingStatsData(
        overall=compute_overall_stats(items),
        cuisine_rankings=compute_cuisine_rankings(items),
    )
