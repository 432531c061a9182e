from __future__ import annotations

import json
import logging

from groq import Groq

from ..rankings.models import SentimentAnalysis, SentimentLabel
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a sentiment classifier for restaurant reviews. "
    "Given one review comment, rate its overall polarity as a number "
    "between -1.0 (very negative) and 1.0 (very positive), with 0.0 "
    "meaning neutral or mixed.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"score": <number between -1.0 and 1.0>}'
)


def label_for_score(score: float, threshold: float = DEFAULT_LLM_CONFIG.label_threshold) -> SentimentLabel:
    if score > threshold:
        return SentimentLabel.positive
    if score < -threshold:
        return SentimentLabel.negative
    return SentimentLabel.neutral


def build_analysis(score: float, config: LLMConfig = DEFAULT_LLM_CONFIG) -> SentimentAnalysis:
    score = max(-1.0, min(1.0, float(score)))
    return SentimentAnalysis(
        score=score,
        label=label_for_score(score, config.label_threshold),
        confidence=abs(score),
    )


def analyze_sentiment(text: str, config: LLMConfig = DEFAULT_LLM_CONFIG) -> SentimentAnalysis:
    """
    Call Groq LLM to score the sentiment of a review comment.

    Returns a neutral analysis (score 0) on any failure
    (disabled, missing key, timeout, bad JSON, API error).
    """
    if not config.enabled or not config.api_key:
        return build_analysis(0.0, config)

    if not text.strip():
        return build_analysis(0.0, config)

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            max_tokens=config.max_tokens,
            temperature=0.0,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)
        return build_analysis(float(parsed["score"]), config)

    except Exception:
        logger.warning("Groq sentiment call failed, falling back to neutral score", exc_info=True)
        return build_analysis(0.0, config)
