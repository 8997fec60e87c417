"""Tests for the search engine."""

import pytest

from docsite_search.config import Settings
from docsite_search.engine import (
    SearchEngine,
    build_wildcard_regex,
    calculate_score,
    find_plain,
    find_wildcard,
)
from docsite_search.exceptions import ValidationError
from docsite_search.models import FieldMatches, IndexedPage


@pytest.fixture
def engine(settings: Settings) -> SearchEngine:
    """Create a search engine.

    Args:
        settings: Settings fixture.

    Returns:
        SearchEngine instance.
    """
    return SearchEngine(settings)


def test_plain_query_matches_title(engine: SearchEngine, sample_index: list[IndexedPage]) -> None:
    """Test that a title match yields a single, title-weighted result."""
    results = engine.perform_search("first", sample_index)

    assert len(results) == 1
    assert results[0].title == "First page"
    assert results[0].score >= 10


def test_wildcard_query_matches_all_pages(engine: SearchEngine, sample_index: list[IndexedPage]) -> None:
    """Test that "pag*" matches the word "page" in every page."""
    results = engine.perform_search("pag*", sample_index)

    assert [result.slug for result in results] == ["first", "second", "third"]
    # One title word and one content word each
    assert all(result.score == 11 for result in results)


def test_short_query_rejected(engine: SearchEngine, sample_index: list[IndexedPage]) -> None:
    """Test that queries below the minimum length raise a validation error."""
    with pytest.raises(ValidationError, match="at least 3 characters"):
        engine.perform_search("ab", sample_index)


@pytest.mark.parametrize("query", ["", "   ", " ab "])
def test_blank_or_short_after_trim_rejected(engine: SearchEngine, query: str) -> None:
    """Test that the length check applies to the trimmed query."""
    with pytest.raises(ValidationError):
        engine.perform_search(query, [])


def test_weighted_score() -> None:
    """Test field weights 10/5/2/1."""
    matches = FieldMatches(title=(0,), keywords=(0, 5), metadata=(3,), content=(1, 2, 3))

    assert calculate_score(matches) == 10 + 2 * 5 + 2 + 3


def test_every_field_contributes(engine: SearchEngine) -> None:
    """Test that keywords and metadata matches add to the score."""
    page = IndexedPage(
        title="Routing",
        slug="routing",
        route="/routing",
        content="Routes map URLs. Routing is simple.",
        version="6.0",
        keywords="routing router",
        metadata="How routing works",
    )

    results = engine.perform_search("routing", [page])

    assert results[0].score == 10 + 5 + 2 + 1


def test_results_sorted_by_score_with_stable_ties(engine: SearchEngine) -> None:
    """Test descending score order and index order among equal scores."""
    index = [
        IndexedPage(title="Alpha", slug="a", route="/a", content="cache", version="6.0"),
        IndexedPage(title="Cache guide", slug="b", route="/b", content="cache cache", version="6.0"),
        IndexedPage(title="Beta", slug="c", route="/c", content="cache", version="6.0"),
        IndexedPage(title="Gamma", slug="d", route="/d", content="nothing here", version="6.0"),
    ]

    results = engine.perform_search("cache", index)

    assert [result.slug for result in results] == ["b", "a", "c"]
    assert all(result.score > 0 for result in results)
    scores = [result.score for result in results]
    assert scores == sorted(scores, reverse=True)


def test_results_truncated_to_max_results(sample_index: list[IndexedPage]) -> None:
    """Test that the result list is capped by max_results."""
    engine = SearchEngine(Settings(max_results=2))

    results = engine.perform_search("page", sample_index)

    assert len(results) == 2


def test_snippet_prefers_title(engine: SearchEngine, sample_index: list[IndexedPage]) -> None:
    """Test that the title supplies the snippet when it matches."""
    results = engine.perform_search("first", sample_index)

    assert results[0].snippet == "First page"


def test_snippet_from_content_when_only_content_matches(engine: SearchEngine) -> None:
    """Test that the content supplies the snippet, windowed around the first match."""
    content = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. The cache layer stores indexes."
    page = IndexedPage(title="Internals", slug="internals", route="/internals", content=content, version="6.0")

    results = engine.perform_search("cache", [page])

    snippet = results[0].snippet
    assert snippet.startswith("...")
    assert snippet.endswith("...")
    assert "cache" in snippet


def test_find_plain_non_overlapping() -> None:
    """Test that occurrences do not overlap."""
    assert find_plain("aaa", "aaaaaaa") == (0, 3)


def test_find_plain_case_insensitive() -> None:
    """Test case-insensitive plain matching."""
    assert find_plain("PAGE", "Page one, page two") == (0, 10)


def test_find_plain_uses_character_offsets() -> None:
    """Test that offsets count characters, not bytes."""
    assert find_plain("clé", "Une clé, deux clés") == (4, 14)


def test_find_plain_offsets_after_case_expanding_characters() -> None:
    """Test that characters whose lowercase form is longer do not shift offsets."""
    assert find_plain("page", "İİİ page") == (4,)


def test_snippet_centred_after_case_expanding_characters() -> None:
    """Test that the content snippet is windowed on the actual match."""
    content = "İ" * 40 + " the cache layer"
    page = IndexedPage(title="Internals", slug="internals", route="/internals", content=content, version="6.0")

    results = SearchEngine(Settings(snippet_length=10)).perform_search("cache", [page])

    assert results[0].snippet == "...İİİİİ the cache laye..."


def test_wildcard_question_mark_matches_one_character() -> None:
    """Test that "?" stands for exactly one character."""
    regex = build_wildcard_regex("p?ge")

    assert find_wildcard(regex, "page pge paage PAGE") == (0, 15)


def test_wildcard_star_matches_zero_or_more() -> None:
    """Test that "*" stands for any run of characters, including none."""
    regex = build_wildcard_regex("inst*ion")

    assert find_wildcard(regex, "Installation instion install") == (0, 13)


def test_wildcard_escapes_metacharacters() -> None:
    """Test that regex metacharacters in a wildcard query are literal."""
    regex = build_wildcard_regex("c++*")

    assert find_wildcard(regex, "c++17 cpp c+") == (0,)


def test_wildcard_offsets_follow_whitespace() -> None:
    """Test word offsets with irregular spacing."""
    regex = build_wildcard_regex("b*")

    assert find_wildcard(regex, "a  bb\tc b") == (3, 8)
