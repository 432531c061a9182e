from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Snake-case attributes in Python, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SentimentLabel(str, Enum):
    positive = "positive"
    negative = "negative"
    neutral = "neutral"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class TopCategory(str, Enum):
    overall = "overall"
    most_positive = "mostPositive"
    most_reviewed = "mostReviewed"
    trending = "trending"


# ── Stored documents ─────────────────────────────────────────────────────


class SentimentAnalysis(CamelModel):
    score: float = 0.0
    label: SentimentLabel = SentimentLabel.neutral
    confidence: float = Field(default=0.0, ge=0.0)


class RestaurantOut(CamelModel):
    id: str
    name: str
    location: str | None = None
    cuisine: str
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def created_at_in_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class Restaurant(RestaurantOut):
    # Cached comment ids; membership is always re-derived from Comment.restaurant.
    comments: list[str] = Field(default_factory=list)


class Comment(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str
    content: str = Field(..., min_length=1)
    user: str
    restaurant: str
    sentiment_analysis: SentimentAnalysis = Field(default_factory=SentimentAnalysis)
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def created_at_in_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


# ── Derived metrics ──────────────────────────────────────────────────────


class RestaurantMetrics(CamelModel):
    total_comments: int = 0
    positive_comments: int = 0
    negative_comments: int = 0
    neutral_comments: int = 0
    avg_sentiment_score: float = 0.0
    positive_percentage: float = 0.0
    negative_percentage: float = 0.0
    overall_score: float = 0.0
    recent_activity: datetime | None = None


class RankedRestaurant(RestaurantOut, RestaurantMetrics):
    rank_position: int | None = None


class PaginationInfo(CamelModel):
    current_page: int
    total_pages: int
    total_restaurants: int
    has_next: bool
    has_prev: bool


class RankingFilters(CamelModel):
    cuisine: str | None = None
    location: str | None = None
    min_comments: int = 1
    sort_by: str = "overallScore"
    order: SortOrder = SortOrder.desc


class RankingsData(CamelModel):
    rankings: list[RankedRestaurant]
    pagination: PaginationInfo
    filters: RankingFilters


class TopRestaurantsData(CamelModel):
    category: TopCategory
    top_restaurants: list[RankedRestaurant]
    count: int


class OverallStats(CamelModel):
    total_restaurants: int = 0
    restaurants_with_reviews: int = 0
    total_comments: int = 0
    avg_comments_per_restaurant: float = 0.0


class CuisineStats(CamelModel):
    cuisine: str
    restaurant_count: int
    total_comments: int
    avg_sentiment_score: float


class RankingStatsData(CamelModel):
    overall: OverallStats
    cuisine_rankings: list[CuisineStats]


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    data: T


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
