from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RankingConfig:
    default_page_size: int = 20
    max_page_size: int = 100
    default_min_comments: int = 1
    default_top_limit: int = 10
    default_browse_page_size: int = 10
    default_comments_page_size: int = 5
    reliability_floor: int = 3  # minimum comments for category top-lists
    trending_window_days: int = 30
    boost_divisor: float = 10.0
    boost_cap: float = 2.0


DEFAULT_RANKING_CONFIG = RankingConfig()
