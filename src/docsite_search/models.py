"""Data models for documentation search."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class Version:
    """A configured documentation release line."""

    id: str
    label: str
    latest: bool = False


@dataclass(frozen=True)
class CorpusPage:
    """A documentation page as supplied by a corpus provider.

    ``content`` holds the rendered HTML body of the page.
    """

    title: str
    slug: str
    route: str
    content: str
    version: str
    front_matter: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexedPage:
    """Plain-text, field-separated representation of one page, ready for searching."""

    title: str
    slug: str
    route: str
    content: str
    version: str
    keywords: str = ""
    metadata: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the page as a plain dictionary.

        Returns:
            Mapping of field name to value.
        """
        return asdict(self)


@dataclass(frozen=True)
class FieldMatches:
    """Match offsets found in each searchable field of a page."""

    title: tuple[int, ...] = ()
    keywords: tuple[int, ...] = ()
    metadata: tuple[int, ...] = ()
    content: tuple[int, ...] = ()


@dataclass(frozen=True)
class SearchResult:
    """Represents a search result."""

    title: str
    slug: str
    route: str
    snippet: str
    score: int
    version: str

    def to_dict(self) -> dict[str, str | int]:
        """Return the result as a plain dictionary.

        Returns:
            Mapping of field name to value.
        """
        return asdict(self)


@dataclass(frozen=True)
class SearchResponse:
    """A page of ranked search results with counts."""

    rows: list[SearchResult]
    count: int
    count_filtered: int
    page: int
    size: int

    def to_dict(self) -> dict[str, Any]:
        """Return the response in its JSON-ready shape.

        Returns:
            Dictionary with ``rows``, ``count``, ``count_filtered``, ``page`` and ``size``.
        """
        return {
            "rows": [row.to_dict() for row in self.rows],
            "count": self.count,
            "count_filtered": self.count_filtered,
            "page": self.page,
            "size": self.size,
        }
