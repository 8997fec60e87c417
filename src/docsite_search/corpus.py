"""Documentation corpus: version registry and page providers."""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from docsite_search.config import Settings
from docsite_search.exceptions import CorpusError, UnknownVersionError
from docsite_search.models import CorpusPage, Version
from docsite_search.parser import PageParser

logger = logging.getLogger(__name__)

ORDERING_PREFIX = re.compile(r"^\d+\.")
PAGE_SUFFIXES = (".rst", ".rest")


class VersionRegistry:
    """Resolves version identifiers against the configured versions."""

    def __init__(self, settings: Settings) -> None:
        """Initialise registry from settings.

        Args:
            settings: Search settings holding the available versions.
        """
        self._available = dict(settings.versions.available)
        self._latest = settings.versions.latest

    @property
    def latest(self) -> Version:
        """The version served when none is requested."""
        return self.resolve(None)

    def resolve(self, version: str | None) -> Version:
        """Get the Version for the given identifier.

        Args:
            version: Version identifier, or None/empty for the latest version.

        Returns:
            Version instance.

        Raises:
            UnknownVersionError: If the version is not configured.
        """
        if not version:
            version = self._latest
        if version not in self._available:
            msg = f"Invalid version: {version}"
            raise UnknownVersionError(msg)
        return Version(id=version, label=self._available[version], latest=version == self._latest)

    def versions(self) -> list[Version]:
        """Return every configured version in configuration order."""
        return [self.resolve(version_id) for version_id in self._available]


class CorpusProvider(Protocol):
    """Source of documentation pages for one version."""

    def get_flattened_pages(self, version: str) -> list[CorpusPage]:
        """Return the version's pages in depth-first tree order."""
        ...


@dataclass
class PageNode:
    """A page and its child pages in the documentation tree."""

    page: CorpusPage
    children: list["PageNode"] = field(default_factory=list)


def flatten_tree(roots: Iterable[PageNode]) -> list[CorpusPage]:
    """Flatten a page tree in depth-first pre-order.

    Args:
        roots: Top-level nodes of the tree, in order.

    Returns:
        Pages with every parent immediately followed by its descendants.
    """
    flat: list[CorpusPage] = []
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        flat.append(node.page)
        stack.extend(reversed(node.children))
    return flat


def parent_slug(slug: str) -> str:
    """Return the slug of the direct parent of a page.

    Args:
        slug: Page slug.

    Returns:
        Parent slug, empty for top-level pages.
    """
    return slug.rpartition("/")[0]


def build_tree(pages: Sequence[CorpusPage]) -> list[PageNode]:
    """Arrange pages into a tree using their slugs.

    A page is attached to its nearest ancestor present in ``pages``; pages with
    no ancestor become roots. Input order is kept among siblings.

    Args:
        pages: Pages of one version, in sibling order.

    Returns:
        Root nodes of the tree.
    """
    nodes = {page.slug: PageNode(page) for page in pages}
    roots: list[PageNode] = []
    for page in pages:
        node = nodes[page.slug]
        ancestor = parent_slug(page.slug) if page.slug else None
        while ancestor is not None and ancestor not in nodes:
            ancestor = parent_slug(ancestor) if ancestor else None
        if ancestor is None:
            roots.append(node)
        else:
            nodes[ancestor].children.append(node)
    return roots


class StaticCorpus:
    """Corpus over page trees supplied by the host application."""

    def __init__(self, trees: Mapping[str, Sequence[PageNode]]) -> None:
        """Initialise corpus.

        Args:
            trees: Root page nodes keyed by version identifier.
        """
        self.trees = trees

    def get_flattened_pages(self, version: str) -> list[CorpusPage]:
        """Return the version's pages in depth-first tree order.

        Args:
            version: Version identifier.

        Returns:
            Flattened pages, empty if the version has no tree.
        """
        return flatten_tree(self.trees.get(version, ()))


class FileSystemCorpus:
    """Reads reST documentation pages from ``<docs_path>/<version>/``."""

    def __init__(
        self,
        docs_path: Path,
        registry: VersionRegistry,
        route_prefix: str = "/",
        parser: PageParser | None = None,
    ) -> None:
        """Initialise corpus.

        Args:
            docs_path: Root directory holding one directory per version.
            registry: Version registry used to build routes.
            route_prefix: URL prefix for page routes.
            parser: Page parser, a default PageParser when omitted.
        """
        self.docs_path = docs_path
        self.registry = registry
        self.route_prefix = route_prefix if route_prefix.endswith("/") else f"{route_prefix}/"
        self.parser = parser or PageParser()

    def get_flattened_pages(self, version: str) -> list[CorpusPage]:
        """Parse every page of a version and return them in depth-first tree order.

        Args:
            version: Version identifier.

        Returns:
            Flattened pages.

        Raises:
            CorpusError: If the version directory does not exist.
        """
        version_obj = self.registry.resolve(version)
        version_path = self.docs_path / version_obj.id
        if not version_path.is_dir():
            msg = f"Documentation path does not exist: {version_path}"
            raise CorpusError(msg)

        pages: list[CorpusPage] = []
        seen: set[str] = set()
        for file_path in self._page_files(version_path):
            slug = self.slug_for(file_path.relative_to(version_path))
            if slug in seen:
                logger.warning("Duplicate slug %r in version %s, skipping %s", slug, version_obj.id, file_path)
                continue

            parsed = self.parser.parse_file(file_path)
            if parsed is None:
                continue

            seen.add(slug)
            pages.append(
                CorpusPage(
                    title=parsed.title,
                    slug=slug,
                    route=self.route_for(version_obj, slug),
                    content=parsed.html,
                    version=version_obj.id,
                    front_matter=parsed.front_matter,
                )
            )

        logger.info("Found %d pages for version %s", len(pages), version_obj.id)
        return flatten_tree(build_tree(pages))

    @staticmethod
    def _page_files(version_path: Path) -> list[Path]:
        files = [path for path in version_path.rglob("*") if path.suffix in PAGE_SUFFIXES and path.is_file()]
        return sorted(files, key=lambda path: path.relative_to(version_path).as_posix())

    @staticmethod
    def slug_for(relative_path: Path) -> str:
        """Compute the slug of a page from its path inside the version directory.

        Ordering prefixes are removed from every segment and an ``index`` page
        stands for its directory, so ``02.background/01.intro/index.rst``
        becomes ``background/intro``.

        Args:
            relative_path: Path relative to the version directory.

        Returns:
            Page slug, empty for the version's home page.
        """
        parts = list(relative_path.with_suffix("").parts)
        if parts and parts[-1] == "index":
            parts.pop()
        return "/".join(ORDERING_PREFIX.sub("", part) for part in parts)

    def route_for(self, version: Version, slug: str) -> str:
        """Compute the URL of a page.

        Args:
            version: Version the page belongs to.
            slug: Page slug.

        Returns:
            Route without the version segment for the latest version.
        """
        if version.latest:
            return f"{self.route_prefix}{slug}"
        return f"{self.route_prefix}{version.id}/{slug}"
