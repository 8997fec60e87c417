"""Derives plain-text search fields from rendered pages and their front matter."""

import html
import re
from collections.abc import Mapping, Sequence
from typing import Any

BLOCK_TAGS = r"div|p|h[1-6]|li|pre|code|blockquote"

SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
BLOCK_OPEN_RE = re.compile(rf"<(?:{BLOCK_TAGS})\b[^>]*>", re.IGNORECASE)
BLOCK_CLOSE_RE = re.compile(rf"</(?:{BLOCK_TAGS})\s*>", re.IGNORECASE)
COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
TAG_RE = re.compile(r"</?[a-zA-Z!][^>]*>")
WHITESPACE_RE = re.compile(r"\s+")


def strip_markup(markup: str) -> str:
    """Convert rendered HTML into searchable plain text.

    Script and style blocks are dropped with their content, block-level tag
    boundaries are padded with a space so adjacent words never merge, the
    remaining tags are removed and entities decoded.

    Args:
        markup: HTML text.

    Returns:
        Plain text with whitespace collapsed to single spaces.
    """
    text = SCRIPT_STYLE_RE.sub("", markup)
    text = COMMENT_RE.sub("", text)
    text = BLOCK_OPEN_RE.sub(lambda match: f" {match.group(0)}", text)
    text = BLOCK_CLOSE_RE.sub(lambda match: f"{match.group(0)} ", text)
    text = TAG_RE.sub("", text)
    text = html.unescape(text)
    # Decoding may reintroduce angle brackets, which are kept as literal text
    return WHITESPACE_RE.sub(" ", text).strip()


def flatten_value(value: Any) -> str:
    """Reduce a front matter value to a single-space separated string.

    Args:
        value: Scalar, list or missing front matter value.

    Returns:
        String value, empty for missing values.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Sequence):
        return " ".join(part for part in (flatten_value(item) for item in value) if part)
    if isinstance(value, Mapping):
        return " ".join(part for part in (flatten_value(item) for item in value.values()) if part)
    return str(value)


class FieldExtractor:
    """Builds the keyword and metadata search fields of a page."""

    KEYWORDS_FIELD = "keywords"

    def __init__(self, metadata_fields: Sequence[str]) -> None:
        """Initialise extractor.

        Args:
            metadata_fields: Front matter keys folded into the metadata field, in order.
        """
        # Keep the first occurrence of each key so no field is counted twice
        self.metadata_fields = tuple(dict.fromkeys(metadata_fields))

    def keywords(self, front_matter: Mapping[str, Any]) -> str:
        """Extract the keywords field.

        Args:
            front_matter: Page front matter.

        Returns:
            Space-joined keywords, empty when the page declares none.
        """
        return flatten_value(front_matter.get(self.KEYWORDS_FIELD))

    def metadata(self, front_matter: Mapping[str, Any]) -> str:
        """Extract the metadata field.

        Args:
            front_matter: Page front matter.

        Returns:
            Values of the configured fields in configuration order, empty values skipped.
        """
        values = (flatten_value(front_matter.get(name)) for name in self.metadata_fields)
        return " ".join(value for value in values if value)
