from __future__ import annotations

from ..rankings.models import (
    CamelModel,
    Comment,
    PaginationInfo,
    RestaurantOut,
    SentimentAnalysis,
    SentimentLabel,
)


class RestaurantSummary(RestaurantOut):
    comment_count: int = 0


class RestaurantListData(CamelModel):
    restaurants: list[RestaurantSummary]
    pagination: PaginationInfo


class CommentsPagination(CamelModel):
    current_page: int
    total_pages: int
    total_comments: int
    has_next: bool
    has_prev: bool


class SentimentStat(CamelModel):
    label: SentimentLabel
    count: int
    avg_score: float


class RestaurantDetailData(CamelModel):
    restaurant: RestaurantOut
    comments: list[Comment] | None = None
    comments_pagination: CommentsPagination | None = None
    sentiment_stats: list[SentimentStat]


class ReviewRequest(CamelModel):
    restaurant_id: str | None = None
    comment: str | None = None


class RestaurantBrief(CamelModel):
    name: str
    location: str | None = None
    cuisine: str


class ReviewData(CamelModel):
    comment_id: str
    restaurant_id: str
    restaurant: RestaurantBrief
    user_id: str
    comment: str
    sentiment_analysis: SentimentAnalysis
