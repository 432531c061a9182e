from __future__ import annotations

from datetime import datetime

import pytest

from backend.rankings.aggregator import RankingQuery, count_rankings, get_rankings
from backend.rankings.errors import InvalidQueryError
from backend.rankings.models import RankedRestaurant, SortOrder
from backend.rankings.pipeline import (
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


def _ranked(name: str, score: float, total: int = 1) -> RankedRestaurant:
    return RankedRestaurant(
        id=name, name=name, cuisine="Thai", overall_score=score, total_comments=total,
    )


# ── Individual stages ────────────────────────────────────────────────────


def test_match_is_case_insensitive_substring(seeded_store):
    matched = match_restaurants(seeded_store, cuisine="ital")
    assert {r.name for r in matched} == {"Giuseppe's Italian Kitchen", "Nonna's Pizzeria"}


def test_match_by_location(seeded_store):
    matched = match_restaurants(seeded_store, location="NEW YORK")
    assert {r.cuisine for r in matched} == {"Italian", "French"}


def test_match_combines_filters(seeded_store):
    matched = match_restaurants(seeded_store, cuisine="mex", location="texas")
    assert [r.name for r in matched] == ["El Mariachi Loco"]


def test_match_pattern_is_literal(seeded_store):
    assert match_restaurants(seeded_store, cuisine=".*") == []


def test_join_uses_comment_reference(empty_store, add_comments):
    a = empty_store.add_restaurant("A", "Thai")
    b = empty_store.add_restaurant("B", "Thai")
    add_comments(empty_store, a.id, [0.5, 0.4])

    joined = dict((r.id, comments) for r, comments in join_comments([a, b], empty_store))
    assert len(joined[a.id]) == 2
    assert joined[b.id] == []


def test_derive_metrics_strips_comment_ids(empty_store, add_comments):
    a = empty_store.add_restaurant("A", "Thai")
    add_comments(empty_store, a.id, [0.5])
    restaurant = empty_store.get_restaurant(a.id)
    assert len(restaurant.comments) == 1

    [item] = derive_metrics(join_comments([restaurant], empty_store))
    assert item.total_comments == 1
    assert "comments" not in item.model_dump(by_alias=True)


def test_filter_min_comments():
    items = [_ranked("a", 0.1, 0), _ranked("b", 0.1, 1), _ranked("c", 0.1, 3)]
    assert [r.name for r in filter_min_comments(items, 1)] == ["b", "c"]
    assert len(filter_min_comments(items, 0)) == 3


def test_sort_is_stable_on_ties():
    items = [_ranked("first", 0.5), _ranked("top", 0.9), _ranked("second", 0.5)]
    key = resolve_sort_key("overallScore")

    desc = sort_ranked(items, key, SortOrder.desc)
    asc = sort_ranked(items, key, SortOrder.asc)

    assert [r.name for r in desc] == ["top", "first", "second"]
    assert [r.name for r in asc] == ["first", "second", "top"]


def test_unknown_sort_field_rejected():
    with pytest.raises(InvalidQueryError):
        resolve_sort_key("comments")


def test_paginate_and_rank_offsets():
    items = [_ranked(str(i), 0.0) for i in range(45)]
    page = assign_ranks(paginate(items, 2, 20), offset=20)
    assert len(page) == 20
    assert [r.rank_position for r in page] == list(range(21, 41))


def test_paginate_past_the_end_is_empty():
    items = [_ranked(str(i), 0.0) for i in range(5)]
    assert paginate(items, 3, 20) == []


def test_build_pagination():
    info = build_pagination(45, 2, 20)
    assert info.total_pages == 3
    assert info.total_restaurants == 45
    assert info.has_next is True
    assert info.has_prev is True

    last = build_pagination(45, 3, 20)
    assert last.has_next is False


# ── Aggregator ───────────────────────────────────────────────────────────


def test_rankings_page_two_of_forty_five(empty_store, add_comments):
    for i in range(45):
        r = empty_store.add_restaurant(f"R{i:02d}", "Thai")
        add_comments(empty_store, r.id, [i / 100])

    page, info = get_rankings(empty_store, RankingQuery(page=2, limit=20))

    assert len(page) == 20
    assert [r.rank_position for r in page] == list(range(21, 41))
    assert info.current_page == 2
    assert info.total_pages == 3
    assert info.total_restaurants == 45
    assert info.has_next and info.has_prev
    # Descending by overallScore: R44 is first overall, so page 2 starts at R24.
    assert page[0].name == "R24"


def test_volume_outranks_raw_average(empty_store, add_comments):
    b = empty_store.add_restaurant("B", "Italian")
    a = empty_store.add_restaurant("A", "Italian")
    add_comments(empty_store, b.id, [0.9, 0.9])
    add_comments(empty_store, a.id, [0.6] * 10)

    page, _ = get_rankings(empty_store, RankingQuery())
    assert [r.name for r in page] == ["A", "B"]
    assert page[0].overall_score == pytest.approx(1.2)
    assert page[1].overall_score == pytest.approx(1.08)


def test_default_min_comments_excludes_unreviewed(empty_store, add_comments):
    reviewed = empty_store.add_restaurant("Reviewed", "Thai")
    empty_store.add_restaurant("Quiet", "Thai")
    add_comments(empty_store, reviewed.id, [0.2])

    page, info = get_rankings(empty_store, RankingQuery())
    assert [r.name for r in page] == ["Reviewed"]
    assert info.total_restaurants == 1

    page, info = get_rankings(empty_store, RankingQuery(min_comments=0))
    assert info.total_restaurants == 2
    assert page[-1].overall_score == 0


def test_rankings_sort_ascending_by_total(empty_store, add_comments):
    for name, n in (("Two", 2), ("One", 1), ("Three", 3)):
        r = empty_store.add_restaurant(name, "Thai")
        add_comments(empty_store, r.id, [0.1] * n)

    page, _ = get_rankings(
        empty_store, RankingQuery(sort_by="totalComments", order=SortOrder.asc),
    )
    assert [r.name for r in page] == ["One", "Two", "Three"]


def test_rankings_reject_unknown_sort_before_reading(empty_store):
    empty_store.close()
    with pytest.raises(InvalidQueryError):
        get_rankings(empty_store, RankingQuery(sort_by="bogus"))


def test_count_matches_filtered_total(seeded_store, add_comments):
    add_comments(seeded_store, "rst-001", [0.4])
    add_comments(seeded_store, "rst-014", [0.4, 0.2])
    add_comments(seeded_store, "rst-002", [0.4])

    query = RankingQuery(cuisine="italian", min_comments=1)
    assert count_rankings(seeded_store, query) == 2
    assert count_rankings(seeded_store, RankingQuery(cuisine="italian", min_comments=2)) == 1


def test_rankings_sort_by_created_at_mixes_naive_and_aware(empty_store, add_comments):
    recent = empty_store.add_restaurant("Recent", "Thai")
    old = empty_store.add_restaurant("Old", "Thai", created_at=datetime(2025, 1, 1))
    add_comments(empty_store, recent.id, [0.1])
    add_comments(empty_store, old.id, [0.1])

    page, _ = get_rankings(
        empty_store, RankingQuery(sort_by="createdAt", order=SortOrder.asc),
    )
    assert [r.name for r in page] == ["Old", "Recent"]


def test_rankings_sort_by_recent_activity(empty_store, add_comments):
    quiet = empty_store.add_restaurant("Quiet", "Thai")
    busy = empty_store.add_restaurant("Busy", "Thai")
    lapsed = empty_store.add_restaurant("Lapsed", "Thai")
    add_comments(empty_store, busy.id, [0.2], days_ago=1)
    add_comments(empty_store, lapsed.id, [0.9], days_ago=40)

    page, _ = get_rankings(
        empty_store, RankingQuery(sort_by="recentActivity", min_comments=0),
    )
    assert [r.name for r in page] == ["Busy", "Lapsed", "Quiet"]
    assert quiet.id == page[-1].id
