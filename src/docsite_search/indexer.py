"""Indexer building per-version search indexes from the documentation corpus."""

import logging

from docsite_search.cache import CacheBackend, IndexCache
from docsite_search.config import Settings
from docsite_search.corpus import CorpusProvider, VersionRegistry
from docsite_search.extractor import FieldExtractor, strip_markup
from docsite_search.models import CorpusPage, IndexedPage

logger = logging.getLogger(__name__)


class Indexer:
    """Indexes documentation pages for search, one index per version."""

    def __init__(
        self,
        corpus: CorpusProvider,
        registry: VersionRegistry,
        settings: Settings,
        backend: CacheBackend,
    ) -> None:
        """Initialise indexer.

        Args:
            corpus: Provider of flattened pages per version.
            registry: Registry resolving version identifiers.
            settings: Search settings.
            backend: Key-value store for built indexes.
        """
        self.corpus = corpus
        self.registry = registry
        self.settings = settings
        self.extractor = FieldExtractor(settings.metadata_fields)
        self.cache = IndexCache(backend, settings, rebuild=self.index_version)

    def build_index(self, version: str | None = None) -> int:
        """Build the search index for one version or for every configured version.

        Each built index replaces the cached entry of its version as a whole.

        Args:
            version: Version to index, or None for all versions.

        Returns:
            Number of pages indexed across the processed versions.

        Raises:
            UnknownVersionError: If ``version`` is not configured.
        """
        versions = self.registry.versions() if version is None else [self.registry.resolve(version)]

        total_pages = 0
        for version_obj in versions:
            pages = self.index_version(version_obj.id)
            total_pages += len(pages)
            self.cache.put(version_obj.id, pages)

        logger.info("Successfully indexed %d pages across %d versions", total_pages, len(versions))
        return total_pages

    def index_version(self, version: str) -> tuple[IndexedPage, ...]:
        """Index all pages of a version without touching the cache.

        Args:
            version: Version identifier.

        Returns:
            Indexed pages in corpus order.
        """
        logger.info("Indexing documentation version %s...", version)
        pages = tuple(self.index_page(page) for page in self.corpus.get_flattened_pages(version))
        logger.info("Indexed %d pages for version %s", len(pages), version)
        return pages

    def index_page(self, page: CorpusPage) -> IndexedPage:
        """Index a single page.

        Args:
            page: Page supplied by the corpus.

        Returns:
            IndexedPage with plain-text content and extracted fields.
        """
        logger.debug("Indexed: %s", page.slug)
        return IndexedPage(
            title=page.title,
            slug=page.slug,
            route=page.route,
            content=strip_markup(page.content),
            version=page.version,
            keywords=self.extractor.keywords(page.front_matter),
            metadata=self.extractor.metadata(page.front_matter),
        )
