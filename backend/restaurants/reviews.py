from __future__ import annotations

import logging
from typing import Callable

from ..llm.groq_client import analyze_sentiment
from ..rankings.errors import InvalidQueryError
from ..rankings.models import SentimentAnalysis
from ..store.documents import DocumentStore
from .models import RestaurantBrief, ReviewData

logger = logging.getLogger(__name__)

SentimentAnalyzer = Callable[[str], SentimentAnalysis]


def submit_review(
    store: DocumentStore,
    user_id: str,
    restaurant_id: str | None,
    content: str | None,
    analyzer: SentimentAnalyzer | None = None,
) -> ReviewData:
    """Score a review comment and store it against its restaurant."""
    analyzer = analyzer or analyze_sentiment
    content = (content or "").strip()
    if not restaurant_id or not content:
        raise InvalidQueryError("Please provide restaurant ID and comment")

    restaurant = store.get_restaurant(restaurant_id)
    analysis = analyzer(content)
    comment = store.add_comment(content, user_id, restaurant.id, sentiment=analysis)
    logger.info(
        "Stored comment %s for restaurant %s (label=%s)",
        comment.id, restaurant.id, analysis.label.value,
    )

    return ReviewData(
        comment_id=comment.id,
        restaurant_id=restaurant.id,
        restaurant=RestaurantBrief(
            name=restaurant.name,
            location=restaurant.location,
            cuisine=restaurant.cuisine,
        ),
        user_id=user_id,
        comment=comment.content,
        sentiment_analysis=analysis,
    )
