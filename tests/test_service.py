"""Tests for the search service."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from docsite_search.cache import MemoryCache, SQLiteCache
from docsite_search.config import Settings
from docsite_search.corpus import PageNode, StaticCorpus
from docsite_search.exceptions import UnknownVersionError, ValidationError
from docsite_search.models import CorpusPage
from docsite_search.service import SearchService, create_backend, create_service


def make_page(version: str, slug: str, title: str, content: str) -> CorpusPage:
    return CorpusPage(title=title, slug=slug, route=f"/{version}/{slug}", content=content, version=version)


@pytest.fixture
def large_service(settings: Settings, backend: MemoryCache) -> SearchService:
    """Create a service whose latest version has five pages matching "guide".

    Returns:
        SearchService instance.
    """
    nodes = [
        PageNode(make_page("6.0", f"page-{number}", f"Page {number}", "<p>" + "guide " * number + "</p>"))
        for number in range(1, 6)
    ]
    nodes.append(PageNode(make_page("6.0", "other", "Other", "<p>Nothing to see.</p>")))
    return SearchService(settings, StaticCorpus({"6.0": nodes, "5.1": []}), backend)


def test_search_latest_version_by_default(service: SearchService) -> None:
    """Test that searches target the latest version when none is given."""
    response = service.search("first")

    assert [row.slug for row in response.rows] == ["first"]
    assert response.rows[0].version == "6.0"
    assert response.count == 3
    assert response.count_filtered == 1


def test_search_specific_version(service: SearchService) -> None:
    """Test searching an older version."""
    response = service.search("legacy", version="5.1")

    assert [row.slug for row in response.rows] == ["legacy"]
    assert response.rows[0].route == "/5.1/legacy"


def test_search_unknown_version(service: SearchService) -> None:
    """Test that an unknown version is rejected."""
    with pytest.raises(UnknownVersionError):
        service.search("page", version="1.0")


def test_short_query_rejected_before_index(settings: Settings) -> None:
    """Test that query validation happens before the index is read."""
    corpus = Mock()
    backend = Mock()
    service = SearchService(settings, corpus, backend)

    with pytest.raises(ValidationError, match="Query must be at least 3 characters long"):
        service.search("ab")

    corpus.get_flattened_pages.assert_not_called()
    backend.get.assert_not_called()


def test_first_page_holds_best_results(large_service: SearchService) -> None:
    """Test that page 1 of size 2 holds the two highest-scoring results."""
    response = large_service.search("guide", page=1, size=2)

    assert [row.slug for row in response.rows] == ["page-5", "page-4"]
    assert [row.score for row in response.rows] == [5, 4]
    assert response.count == 6
    assert response.count_filtered == 5
    assert response.page == 1
    assert response.size == 2


def test_second_page(large_service: SearchService) -> None:
    """Test the offset of later pages."""
    response = large_service.search("guide", page=2, size=2)

    assert [row.slug for row in response.rows] == ["page-3", "page-2"]


def test_page_past_the_end_keeps_counts(large_service: SearchService) -> None:
    """Test that an out-of-range page is empty with accurate counts."""
    response = large_service.search("guide", page=10, size=2)

    assert response.rows == []
    assert response.count == 6
    assert response.count_filtered == 5


def test_size_all_returns_every_result(large_service: SearchService) -> None:
    """Test that size "all" disables slicing."""
    response = large_service.search("guide", size="all")

    assert len(response.rows) == response.count_filtered == 5
    assert response.size == 0


def test_default_size_applied(settings: Settings, backend: MemoryCache) -> None:
    """Test that the configured default size applies when none is requested."""
    nodes = [PageNode(make_page("6.0", f"p{number}", f"Guide {number}", "")) for number in range(15)]
    service = SearchService(settings, StaticCorpus({"6.0": nodes}), backend)

    response = service.search("guide")

    assert len(response.rows) == 10
    assert response.size == 10
    assert response.count_filtered == 15


def test_invalid_page_rejected(service: SearchService) -> None:
    """Test that pages are 1-based."""
    with pytest.raises(ValidationError, match="Page must be at least 1"):
        service.search("page", page=0)


def test_counts_invariant(large_service: SearchService) -> None:
    """Test count_filtered <= count and rows bounded by size."""
    for query in ("guide", "page", "nothing", "oth*"):
        response = large_service.search(query, size=3)
        assert response.count_filtered <= response.count
        assert len(response.rows) <= min(3, response.count_filtered)


def test_clear_then_search_rebuilds(service: SearchService, backend: MemoryCache) -> None:
    """Test that a search after clearing a version rebuilds its index."""
    service.build_index("6.0")
    service.clear_index("6.0")
    assert backend.get("search-index.6.0") is None

    response = service.search("second", version="6.0")

    assert [row.slug for row in response.rows] == ["first/second"]
    assert backend.get("search-index.6.0") is not None


def test_clear_all_versions(service: SearchService, backend: MemoryCache) -> None:
    """Test that clearing without a version empties every version's entry."""
    assert service.build_index() == 4

    service.clear_index()

    assert backend.get("search-index.6.0") is None
    assert backend.get("search-index.5.1") is None


def test_clear_one_version_leaves_others(service: SearchService, backend: MemoryCache) -> None:
    """Test that clearing one version keeps the other cached."""
    service.build_index()

    service.clear_index("5.1")

    assert backend.get("search-index.6.0") is not None
    assert backend.get("search-index.5.1") is None


def test_to_dict_shape(service: SearchService) -> None:
    """Test the JSON-ready response shape."""
    data = service.search("third").to_dict()

    assert set(data) == {"rows", "count", "count_filtered", "page", "size"}
    assert set(data["rows"][0]) == {"title", "slug", "route", "snippet", "score", "version"}


def test_create_backend_selects_sqlite(tmp_path: Path) -> None:
    """Test that a configured cache path selects the SQLite backend."""
    settings = Settings(cache={"path": tmp_path / "cache.db"})

    assert isinstance(create_backend(settings), SQLiteCache)
    assert isinstance(create_backend(Settings()), MemoryCache)


def test_create_service_requires_docs_path() -> None:
    """Test that the filesystem service needs a documentation path."""
    with pytest.raises(ValueError, match="docs_path"):
        create_service(Settings())
