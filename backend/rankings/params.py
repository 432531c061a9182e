"""Lenient parsing of ranking query-string parameters.

Malformed numbers fall back to their defaults and are clamped into range
instead of failing the request.
"""
from __future__ import annotations

import logging

from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import SortOrder, TopCategory

logger = logging.getLogger(__name__)


def parse_int(
    raw: str | int | None,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    if raw is None or raw == "":
        value = default
    else:
        try:
            value = int(raw)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-numeric parameter %r, using %d", raw, default)
            value = default
    if minimum is not None:
        value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def parse_order(raw: str | None) -> SortOrder:
    if raw and raw.strip().lower() == SortOrder.asc.value:
        return SortOrder.asc
    return SortOrder.desc


def parse_category(raw: str | None) -> TopCategory:
    try:
        return TopCategory(raw) if raw else TopCategory.overall
    except ValueError:
        logger.debug("Unknown top-list category %r, using overall", raw)
        return TopCategory.overall


def parse_page(raw: str | None) -> int:
    return parse_int(raw, 1, minimum=1)


def parse_limit(
    raw: str | None,
    default: int,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> int:
    return parse_int(raw, default, minimum=1, maximum=config.max_page_size)


def clean_pattern(raw: str | None) -> str | None:
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None
