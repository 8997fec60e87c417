"""Shared fixtures for documentation search tests."""

import pytest

from docsite_search.cache import MemoryCache
from docsite_search.config import Settings
from docsite_search.corpus import PageNode, StaticCorpus
from docsite_search.models import CorpusPage, IndexedPage
from docsite_search.service import SearchService


def make_page(version: str, slug: str, title: str, content: str, **front_matter: object) -> CorpusPage:
    """Build a corpus page with a route derived from its slug."""
    return CorpusPage(
        title=title,
        slug=slug,
        route=f"/{version}/{slug}",
        content=content,
        version=version,
        front_matter=dict(front_matter),
    )


@pytest.fixture
def settings() -> Settings:
    """Create settings with two versions.

    Returns:
        Settings instance.
    """
    return Settings(
        min_length=3,
        default_size=10,
        snippet_length=20,
        metadata_fields=["description", "tags"],
        versions={"available": {"6.0": "6.0 Beta", "5.1": "5.1"}, "latest": "6.0"},
    )


@pytest.fixture
def corpus() -> StaticCorpus:
    """Create a corpus with three pages in 6.0 and one page in 5.1.

    Returns:
        StaticCorpus instance.
    """
    first = PageNode(
        make_page("6.0", "first", "First page", "<h1>Intro</h1><p>This is the first page.</p>", keywords=["intro"]),
        children=[
            PageNode(
                make_page(
                    "6.0",
                    "first/second",
                    "Second page",
                    "<p>The second page explains installation.</p>",
                    description="Installing the framework",
                ),
            ),
        ],
    )
    third = PageNode(make_page("6.0", "third", "Third page", "<p>A third page about routing.</p>"))
    legacy = PageNode(make_page("5.1", "legacy", "Legacy page", "<p>Old page content.</p>"))
    return StaticCorpus({"6.0": [first, third], "5.1": [legacy]})


@pytest.fixture
def backend() -> MemoryCache:
    """Create an empty in-memory cache backend.

    Returns:
        MemoryCache instance.
    """
    return MemoryCache()


@pytest.fixture
def service(settings: Settings, corpus: StaticCorpus, backend: MemoryCache) -> SearchService:
    """Create a search service over the sample corpus.

    Returns:
        SearchService instance.
    """
    return SearchService(settings, corpus, backend)


@pytest.fixture
def sample_index() -> list[IndexedPage]:
    """Create an index with three pages mentioning "page".

    Returns:
        Indexed pages in index order.
    """
    return [
        IndexedPage(
            title="First page",
            slug="first",
            route="/first",
            content="This is the first page of the guide.",
            version="6.0",
        ),
        IndexedPage(
            title="Second page",
            slug="second",
            route="/second",
            content="This is the second page of the guide.",
            version="6.0",
        ),
        IndexedPage(
            title="Third page",
            slug="third",
            route="/third",
            content="This is the third page of the guide.",
            version="6.0",
        ),
    ]
