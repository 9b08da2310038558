import pytest

from community_search.search.content_types import ContentType
from community_search.search.ranking import (
    CONTENT_MATCH,
    EXACT_TITLE,
    EXCERPT_MATCH,
    GENERAL_MATCH,
    KEY_TERM_CONTENT,
    KEY_TERM_TITLE,
    RelevanceRanker,
    sort_by_relevance,
)
from community_search.search.records import SearchCandidate


def make_candidate(title="", body="", secondary="", boosted=False, **kwargs):
    return SearchCandidate(
        content_type=ContentType.ARTICLE,
        id=kwargs.pop("id", "x"),
        title=title,
        body=body,
        secondary=secondary,
        boosted=boosted,
        **kwargs
    )


@pytest.fixture
def ranker():
    return RelevanceRanker()


def test_raw_query_in_title(ranker):
    candidate = make_candidate(title="How to Reset Your Password")
    assert ranker.score(candidate, "reset your password", []) == (100, EXACT_TITLE)


def test_raw_query_in_excerpt(ranker):
    candidate = make_candidate(title="Guide", secondary="Reset your password here", body="reset your password")
    assert ranker.score(candidate, "reset your password", []) == (80, EXCERPT_MATCH)


def test_raw_query_in_body(ranker):
    candidate = make_candidate(title="Guide", body="To reset your password open settings")
    assert ranker.score(candidate, "reset your password", []) == (60, CONTENT_MATCH)


def test_term_tiers_decay_with_index(ranker):
    candidate = make_candidate(title="Notifications settings", body="")
    rank, match_type = ranker.score(candidate, "how do i set up notifications", ["set", "notifications"])
    # "set" is inside "settings" and comes first
    assert (rank, match_type) == (90, KEY_TERM_TITLE)

    candidate = make_candidate(title="Notifications", body="")
    assert ranker.score(candidate, "q", ["set", "notifications"]) == (85, KEY_TERM_TITLE)

    candidate = make_candidate(title="Other", body="notifications are emailed")
    assert ranker.score(candidate, "q", ["set", "notifications"]) == (65, KEY_TERM_CONTENT)


def test_term_tier_floor(ranker):
    assert ranker.term_title_tier(0) == 90
    assert ranker.term_body_tier(0) == 70
    assert ranker.term_title_tier(50) == 10
    assert ranker.term_body_tier(50) == 10


def test_title_term_checked_before_later_body_term(ranker):
    candidate = make_candidate(title="Billing", body="password")
    assert ranker.score(candidate, "q", ["password", "billing"]) == (70, KEY_TERM_CONTENT)


def test_no_criterion_gives_minimum(ranker):
    candidate = make_candidate(title="Unrelated", body="nothing here")
    assert ranker.score(candidate, "zebra", ["zebra"]) == (10, GENERAL_MATCH)


def test_boost_added_to_tier(ranker):
    candidate = make_candidate(title="Password help", boosted=True)
    assert ranker.score(candidate, "password", []) == (120, EXACT_TITLE)


def test_exact_title_outranks_any_term_match(ranker):
    exact = make_candidate(id="exact", title="dark mode")
    terms_only = make_candidate(id="terms", title="dark theme mode", body="dark mode everywhere")
    ranked = ranker.rank([terms_only, exact], "dark mode", ["dark", "mode"])
    assert [c.id for c in ranked] == ["exact", "terms"]
    assert ranked[0].rank > ranked[1].rank


def test_rank_is_deterministic(ranker):
    candidate = make_candidate(title="Export data", body="csv export")
    first = ranker.score(candidate, "export", ["export"])
    second = ranker.score(candidate, "export", ["export"])
    assert first == second


def test_sort_ties_by_views_then_recency():
    candidates = [
        make_candidate(id="old", rank=50, view_count=10, created_at="2023-01-01"),
        make_candidate(id="new", rank=50, view_count=10, created_at="2024-01-01"),
        make_candidate(id="popular", rank=50, view_count=99, created_at="2022-01-01"),
        make_candidate(id="top", rank=90, view_count=0, created_at="2020-01-01"),
    ]
    assert [c.id for c in sort_by_relevance(candidates)] == ["top", "popular", "new", "old"]


def test_title_term_match_outranks_incidental_body_match(ranker):
    query = "how do i set up billing"
    terms = ["set", "billing"]
    guide = make_candidate(id="guide", title="Billing Setup Guide")
    incidental = make_candidate(id="other", title="Release notes", body="we picked up speed")
    ranked = ranker.rank([incidental, guide], query, terms)
    assert [c.id for c in ranked] == ["guide", "other"]
    assert ranked[0].match_type == KEY_TERM_TITLE
