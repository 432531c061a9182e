from __future__ import annotations

from datetime import datetime, timedelta

from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import RankedRestaurant, SortOrder, TopCategory, as_utc, utcnow
from .pipeline import (
    RestaurantReader,
    SORT_FIELDS,
    assign_ranks,
    derive_metrics,
    filter_min_comments,
    join_comments,
    sort_ranked,
)

# Each category sorts descending on one metric.
CATEGORY_SORT_FIELD: dict[TopCategory, str] = {
    TopCategory.overall: "overallScore",
    TopCategory.most_positive: "positivePercentage",
    TopCategory.most_reviewed: "totalComments",
    TopCategory.trending: "overallScore",
}


def filter_category(
    items: list[RankedRestaurant],
    category: TopCategory,
    now: datetime | None = None,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> list[RankedRestaurant]:
    if category != TopCategory.trending:
        return items
    cutoff = as_utc(now or utcnow()) - timedelta(days=config.trending_window_days)
    return [
        r for r in items
        if r.recent_activity is not None and r.recent_activity >= cutoff
    ]


def get_top(
    store: RestaurantReader,
    category: TopCategory = TopCategory.overall,
    limit: int | None = None,
    now: datetime | None = None,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> list[RankedRestaurant]:
    """Best restaurants in a fixed category.

    Only restaurants with at least ``config.reliability_floor`` comments are
    eligible. Rank positions always start at 1.
    """
    limit = config.default_top_limit if limit is None else limit

    scored = derive_metrics(join_comments(store.find_all(), store), config)
    eligible = filter_min_comments(scored, config.reliability_floor)
    eligible = filter_category(eligible, category, now=now, config=config)

    key = SORT_FIELDS[CATEGORY_SORT_FIELD[category]]
    ordered = sort_ranked(eligible, key, SortOrder.desc)
    return assign_ranks(ordered[:limit])
