"""Search service: the entry point used by HTTP and command-line front ends."""

import logging

from docsite_search.cache import CacheBackend, MemoryCache, SQLiteCache
from docsite_search.config import Settings
from docsite_search.corpus import CorpusProvider, FileSystemCorpus, VersionRegistry
from docsite_search.engine import SearchEngine
from docsite_search.exceptions import ValidationError
from docsite_search.indexer import Indexer
from docsite_search.models import SearchResponse, SearchResult
from docsite_search.pagination import ListSource, PageSize, Paginator, parse_page_size

logger = logging.getLogger(__name__)


class SearchService:
    """Searches, builds and clears the documentation search index."""

    def __init__(self, settings: Settings, corpus: CorpusProvider, backend: CacheBackend) -> None:
        """Initialise service.

        Args:
            settings: Search settings.
            corpus: Provider of documentation pages.
            backend: Key-value store for built indexes.
        """
        self.settings = settings
        self.registry = VersionRegistry(settings)
        self.indexer = Indexer(corpus, self.registry, settings, backend)
        self.engine = SearchEngine(settings)
        self.paginator: Paginator[SearchResult] = Paginator()

    def search(
        self,
        query: str,
        version: str | None = None,
        page: int = 1,
        size: PageSize | int | str | None = None,
    ) -> SearchResponse:
        """Search one version of the documentation.

        Args:
            query: Search query, literal or with ``*``/``?`` wildcards.
            version: Version to search, the latest when omitted.
            page: 1-based page number.
            size: Results per page, ``"all"`` for every result, the configured default when omitted.

        Returns:
            SearchResponse with the requested page of ranked results.

        Raises:
            ValidationError: If the query, page or size is invalid.
            UnknownVersionError: If the version is not configured.
        """
        query = self.engine.validate_query(query)
        page_size = parse_page_size(size, self.settings.default_size, self.settings.max_size)
        if page < 1:
            msg = "Page must be at least 1"
            raise ValidationError(msg)

        version_obj = self.registry.resolve(version)
        index = self.indexer.cache.get(version_obj.id)
        results = self.engine.perform_search(query, index)
        result_page = self.paginator.paginate(ListSource(results), page, page_size)

        return SearchResponse(
            rows=result_page.rows,
            count=len(index),
            count_filtered=result_page.total,
            page=result_page.page,
            size=result_page.size,
        )

    def build_index(self, version: str | None = None) -> int:
        """Build and cache the index of one or every version.

        Args:
            version: Version to index, or None for all versions.

        Returns:
            Number of pages indexed.
        """
        return self.indexer.build_index(version)

    def clear_index(self, version: str | None = None) -> None:
        """Evict cached indexes.

        Args:
            version: Version to evict, or None for every configured version.
        """
        if version is not None:
            version = self.registry.resolve(version).id
        self.indexer.cache.clear(version)
        logger.info("Cleared search index for %s", f"version {version}" if version else "all versions")


def create_backend(settings: Settings) -> CacheBackend:
    """Create the cache backend selected by the settings.

    Args:
        settings: Search settings.

    Returns:
        SQLiteCache when a cache path is configured, MemoryCache otherwise.
    """
    if settings.cache.path is not None:
        return SQLiteCache(settings.cache.path)
    return MemoryCache()


def create_service(settings: Settings) -> SearchService:
    """Create a service reading reST pages from ``settings.docs_path``.

    Args:
        settings: Search settings.

    Returns:
        SearchService instance.

    Raises:
        ValueError: If no documentation path is configured.
    """
    if settings.docs_path is None:
        msg = "A documentation path (docs_path) must be configured"
        raise ValueError(msg)
    registry = VersionRegistry(settings)
    corpus = FileSystemCorpus(settings.docs_path, registry, route_prefix=settings.route_prefix)
    return SearchService(settings, corpus, create_backend(settings))
