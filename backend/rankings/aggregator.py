from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import PaginationInfo, RankedRestaurant, SortOrder
from .pipeline import (
    RestaurantReader,
    assign_ranks,
    build_pagination,
    derive_metrics,
    filter_min_comments,
    join_comments,
    match_restaurants,
    paginate,
    resolve_sort_key,
    sort_ranked,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingQuery:
    cuisine: str | None = None
    location: str | None = None
    min_comments: int = 1
    sort_by: str = "overallScore"
    order: SortOrder = SortOrder.desc
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def count_rankings(store: RestaurantReader, query: RankingQuery) -> int:
    """Count restaurants passing the cuisine/location and minimum-comment filters.

    Runs its own match and join instead of reusing a paginated slice.
    """
    restaurants = match_restaurants(store, query.cuisine, query.location)
    return sum(
        1 for r in restaurants
        if store.count_by_restaurant(r.id) >= query.min_comments
    )


def get_rankings(
    store: RestaurantReader,
    query: RankingQuery,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> tuple[list[RankedRestaurant], PaginationInfo]:
    # Resolve the sort field first so a bad sortBy never reaches the store.
    sort_key = resolve_sort_key(query.sort_by)

    candidates = match_restaurants(store, query.cuisine, query.location)
    scored = derive_metrics(join_comments(candidates, store), config)
    eligible = filter_min_comments(scored, query.min_comments)
    ordered = sort_ranked(eligible, sort_key, query.order)
    page_items = assign_ranks(
        paginate(ordered, query.page, query.limit), offset=query.offset,
    )

    total = count_rankings(store, query)
    logger.debug(
        "Ranked %d of %d restaurants (page=%d, limit=%d, sortBy=%s)",
        len(page_items), total, query.page, query.limit, query.sort_by,
    )
    return page_items, build_pagination(total, query.page, query.limit)
