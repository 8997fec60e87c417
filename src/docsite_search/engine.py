"""Weighted multi-field matching over an in-memory search index."""

import logging
import re
from collections.abc import Sequence

from docsite_search.config import Settings
from docsite_search.exceptions import ValidationError
from docsite_search.models import FieldMatches, IndexedPage, SearchResult
from docsite_search.snippet import generate_snippet

logger = logging.getLogger(__name__)

SCORE_TITLE = 10
SCORE_KEYWORDS = 5
SCORE_METADATA = 2
SCORE_CONTENT = 1

WORD_RE = re.compile(r"\S+")


def has_wildcards(query: str) -> bool:
    """Return True when the query uses ``*`` or ``?`` wildcards."""
    return "*" in query or "?" in query


def build_wildcard_regex(query: str) -> re.Pattern[str]:
    """Compile a wildcard query into a case-insensitive pattern.

    ``*`` matches any run of characters and ``?`` exactly one, everything else
    is matched literally.

    Args:
        query: Query containing wildcards.

    Returns:
        Compiled pattern.
    """
    pattern = re.escape(query).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(pattern, re.IGNORECASE)


def find_plain(query: str, text: str) -> tuple[int, ...]:
    """Find every non-overlapping, case-insensitive occurrence of a query.

    Args:
        query: Literal query text.
        text: Field text.

    Returns:
        Character offsets of each occurrence, left to right.
    """
    if not query:
        return ()
    # Matched against the original text so offsets stay valid for snippets
    return tuple(match.start() for match in re.finditer(re.escape(query), text, re.IGNORECASE))


def find_wildcard(regex: re.Pattern[str], text: str) -> tuple[int, ...]:
    """Find the words of a field that match a wildcard pattern.

    Args:
        regex: Pattern from ``build_wildcard_regex``.
        text: Field text.

    Returns:
        Starting character offset of each matching word.
    """
    return tuple(word.start() for word in WORD_RE.finditer(text) if regex.search(word.group()))


def calculate_score(matches: FieldMatches) -> int:
    """Weight the match counts of each field into a single score."""
    return (
        len(matches.title) * SCORE_TITLE
        + len(matches.keywords) * SCORE_KEYWORDS
        + len(matches.metadata) * SCORE_METADATA
        + len(matches.content) * SCORE_CONTENT
    )


class SearchEngine:
    """Executes queries against a version's index."""

    def __init__(self, settings: Settings) -> None:
        """Initialise engine.

        Args:
            settings: Search settings (minimum length, result cap, snippet radius).
        """
        self.settings = settings

    def validate_query(self, query: str) -> str:
        """Check a query against the minimum length.

        Args:
            query: Raw query.

        Returns:
            Trimmed query.

        Raises:
            ValidationError: If the trimmed query is empty or too short.
        """
        query = query.strip()
        min_length = self.settings.min_length
        if not query or len(query) < min_length:
            msg = f"Query must be at least {min_length} characters long"
            raise ValidationError(msg)
        return query

    def perform_search(self, query: str, index: Sequence[IndexedPage]) -> list[SearchResult]:
        """Search an index and rank the matching pages.

        Args:
            query: Search query, literal or with wildcards.
            index: Indexed pages of one version.

        Returns:
            Results with a positive score, best first, ties in index order,
            at most ``max_results`` of them.

        Raises:
            ValidationError: If the query is too short.
        """
        query = self.validate_query(query)
        regex = build_wildcard_regex(query) if has_wildcards(query) else None

        results = []
        for page in index:
            matches = self.search_page(page, query, regex)
            score = calculate_score(matches)
            if score > 0:
                results.append(self.create_result(page, matches, score))

        # sorted() is stable, so equal scores keep index order
        results = sorted(results, key=lambda result: result.score, reverse=True)
        logger.debug("Query %r matched %d of %d pages", query, len(results), len(index))
        return results[: self.settings.max_results]

    @staticmethod
    def search_page(page: IndexedPage, query: str, regex: re.Pattern[str] | None) -> FieldMatches:
        """Collect match offsets in every searchable field of a page.

        Args:
            page: Indexed page.
            query: Trimmed query.
            regex: Wildcard pattern, or None for a literal search.

        Returns:
            FieldMatches for the page.
        """
        if regex is not None:
            return FieldMatches(
                title=find_wildcard(regex, page.title),
                keywords=find_wildcard(regex, page.keywords),
                metadata=find_wildcard(regex, page.metadata),
                content=find_wildcard(regex, page.content),
            )
        return FieldMatches(
            title=find_plain(query, page.title),
            keywords=find_plain(query, page.keywords),
            metadata=find_plain(query, page.metadata),
            content=find_plain(query, page.content),
        )

    def create_result(self, page: IndexedPage, matches: FieldMatches, score: int) -> SearchResult:
        """Create a search result with a snippet from the highest-priority matching field.

        Args:
            page: Matching page.
            matches: Match offsets of the page.
            score: Weighted score of the page.

        Returns:
            SearchResult instance.
        """
        source, position = self.select_snippet_source(page, matches)
        return SearchResult(
            title=page.title,
            slug=page.slug,
            route=page.route,
            snippet=generate_snippet(source, position, self.settings.snippet_length),
            score=score,
            version=page.version,
        )

    @staticmethod
    def select_snippet_source(page: IndexedPage, matches: FieldMatches) -> tuple[str, int]:
        """Pick the snippet text and match offset, by field priority.

        Args:
            page: Matching page.
            matches: Match offsets of the page.

        Returns:
            Field text and its first match offset, or an empty source when nothing matched.
        """
        priority = (
            (page.title, matches.title),
            (page.keywords, matches.keywords),
            (page.metadata, matches.metadata),
            (page.content, matches.content),
        )
        for text, offsets in priority:
            if offsets:
                return text, offsets[0]
        return "", 0
