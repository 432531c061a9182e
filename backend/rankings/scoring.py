"""
Per-restaurant sentiment metrics.

Everything here is a pure function of a restaurant's comment set. An empty
comment set yields 0 for every rate and score, never NaN.
"""
from __future__ import annotations

from collections import Counter
from typing import Sequence

from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import Comment, RestaurantMetrics, SentimentLabel


def volume_boost(total_comments: int, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> float:
    """Multiplier rewarding comment volume: ``min(1 + n / 10, 2)``."""
    return min(1 + total_comments / config.boost_divisor, config.boost_cap)


def overall_score(
    avg_sentiment_score: float,
    total_comments: int,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> float:
    if total_comments <= 0:
        return 0.0
    return avg_sentiment_score * volume_boost(total_comments, config)


def _percentage(count: int, total: int) -> float:
    return count / total * 100 if total > 0 else 0.0


def compute_metrics(
    comments: Sequence[Comment],
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> RestaurantMetrics:
    total = len(comments)
    labels: Counter[SentimentLabel] = Counter(c.sentiment_analysis.label for c in comments)

    positive = labels[SentimentLabel.positive]
    negative = labels[SentimentLabel.negative]
    neutral = labels[SentimentLabel.neutral]

    if total > 0:
        avg_score = sum(c.sentiment_analysis.score for c in comments) / total
        recent = max(c.created_at for c in comments)
    else:
        avg_score = 0.0
        recent = None

    return RestaurantMetrics(
        total_comments=total,
        positive_comments=positive,
        negative_comments=negative,
        neutral_comments=neutral,
        avg_sentiment_score=avg_score,
        positive_percentage=_percentage(positive, total),
        negative_percentage=_percentage(negative, total),
        overall_score=overall_score(avg_score, total, config),
        recent_activity=recent,
    )
