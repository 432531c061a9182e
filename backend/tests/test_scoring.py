from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend.llm.groq_client import build_analysis
from backend.rankings.models import Comment, SentimentAnalysis, SentimentLabel
from backend.rankings.scoring import compute_metrics, overall_score, volume_boost

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _comments(scores: list[float]) -> list[Comment]:
    return [
        Comment(
            id=f"c{i}",
            content="tasty",
            user="u1",
            restaurant="r1",
            sentiment_analysis=build_analysis(score),
            created_at=T0 + timedelta(hours=i),
        )
        for i, score in enumerate(scores)
    ]


# ── Zero comments ────────────────────────────────────────────────────────


def test_no_comments_yields_zero_metrics():
    metrics = compute_metrics([])
    assert metrics.total_comments == 0
    assert metrics.avg_sentiment_score == 0
    assert metrics.positive_percentage == 0
    assert metrics.negative_percentage == 0
    assert metrics.overall_score == 0
    assert metrics.recent_activity is None


def test_overall_score_zero_without_comments():
    assert overall_score(0.9, 0) == 0.0


# ── Volume boost ─────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("total", "expected"),
    [(0, 1.0), (5, 1.5), (10, 2.0), (50, 2.0)],
)
def test_volume_boost(total, expected):
    assert volume_boost(total) == pytest.approx(expected)


def test_overall_score_monotonic_in_average():
    scores = [overall_score(avg, 4) for avg in (-0.8, -0.1, 0.0, 0.3, 0.9)]
    assert scores == sorted(scores)


# ── Formula ──────────────────────────────────────────────────────────────


def test_volume_beats_higher_raw_average():
    many = compute_metrics(_comments([0.6] * 10))
    few = compute_metrics(_comments([0.9, 0.9]))

    assert many.overall_score == pytest.approx(1.2)
    assert few.overall_score == pytest.approx(1.08)
    assert many.overall_score > few.overall_score
    assert few.avg_sentiment_score > many.avg_sentiment_score


def test_label_counts_and_percentages():
    metrics = compute_metrics(_comments([0.8, 0.5, -0.7, 0.0]))
    assert metrics.total_comments == 4
    assert metrics.positive_comments == 2
    assert metrics.negative_comments == 1
    assert metrics.neutral_comments == 1
    assert metrics.positive_percentage == pytest.approx(50.0)
    assert metrics.negative_percentage == pytest.approx(25.0)
    assert metrics.avg_sentiment_score == pytest.approx(0.15)
    assert metrics.overall_score == pytest.approx(0.15 * 1.4)


def test_counts_use_stored_label_not_score():
    comment = Comment(
        id="c1",
        content="fine",
        user="u1",
        restaurant="r1",
        sentiment_analysis=SentimentAnalysis(score=0.05, label=SentimentLabel.positive, confidence=0.05),
    )
    metrics = compute_metrics([comment])
    assert metrics.positive_comments == 1
    assert metrics.positive_percentage == 100.0


def test_recent_activity_is_latest_comment():
    comments = _comments([0.1, 0.2, 0.3])
    metrics = compute_metrics(list(reversed(comments)))
    assert metrics.recent_activity == T0 + timedelta(hours=2)


def test_negative_average_is_amplified_by_volume():
    metrics = compute_metrics(_comments([-0.5] * 10))
    assert metrics.overall_score == pytest.approx(-1.0)
