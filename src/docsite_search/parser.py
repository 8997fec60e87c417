"""Parser for reStructuredText documentation pages."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import docutils.core  # type: ignore[import-untyped]
import docutils.nodes  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

DOCUTILS_SETTINGS = {
    "report_level": 5,  # Suppress warnings
    "halt_level": 5,
    "file_insertion_enabled": False,
    "raw_enabled": False,
    "_disable_config": True,
}


@dataclass
class ParsedPage:
    """Title, front matter and rendered body of a reST source file."""

    title: str
    html: str
    front_matter: dict[str, Any] = field(default_factory=dict)


class FrontMatterVisitor(docutils.nodes.GenericNodeVisitor):  # type: ignore[misc]
    """Visitor to extract the document title and docinfo fields from a doctree."""

    def __init__(self, document: docutils.nodes.document) -> None:
        """Initialise front matter visitor.

        Args:
            document: Docutils document tree.
        """
        super().__init__(document)
        self.title: str | None = None
        self.front_matter: dict[str, Any] = {}

    def visit_title(self, node: docutils.nodes.title) -> None:
        """Visit title node (document title after the doctitle transform).

        Args:
            node: Title node.
        """
        if self.title is None:
            self.title = node.astext()

    def visit_docinfo(self, node: docutils.nodes.docinfo) -> None:
        """Collect every docinfo entry as a front matter value.

        Generic fields are keyed by their lowercase name. Registered
        bibliographic fields (author, version, ...) are keyed by tag name.

        Args:
            node: Docinfo node.

        Raises:
            docutils.nodes.SkipNode: Always raised, children are consumed here.
        """
        for child in node.children:
            if isinstance(child, docutils.nodes.field):
                name = child[0].astext().strip().lower()
                self.front_matter[name] = self._field_value(child[1])
            elif isinstance(child, docutils.nodes.authors):
                self.front_matter["authors"] = [author.astext() for author in child.children]
            else:
                self.front_matter[child.tagname] = child.astext()
        raise docutils.nodes.SkipNode

    @staticmethod
    def _field_value(body: docutils.nodes.field_body) -> str | list[str]:
        # A bullet list body is a list value, anything else is literal text
        lists = [child for child in body.children if isinstance(child, docutils.nodes.bullet_list)]
        if lists:
            return [item.astext().strip() for item in lists[0].children]
        return body.astext().strip()

    def default_visit(self, node: docutils.nodes.Node) -> None:
        """Default visit handler (no-op).

        Args:
            node: Any node.
        """

    def default_departure(self, node: docutils.nodes.Node) -> None:
        """Default departure handler (no-op).

        Args:
            node: Any node.
        """


class PageParser:
    """Parses reST page sources into a title, front matter and an HTML body."""

    def parse_file(self, file_path: Path) -> ParsedPage | None:
        """Parse a reST file.

        Args:
            file_path: Path to the reST file.

        Returns:
            ParsedPage instance or None if the file cannot be read or parsed.
        """
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read %s: %s", file_path, exc)
            return None

        try:
            return self.parse_source(source, file_path)
        except Exception:
            logger.warning("Failed to parse: %s", file_path, exc_info=True)
            return None

    def parse_source(self, source: str, file_path: Path) -> ParsedPage:
        """Parse reST source text.

        Args:
            source: reST source text.
            file_path: Path of the source, used for error reporting and the title fallback.

        Returns:
            ParsedPage instance.
        """
        doctree = docutils.core.publish_doctree(
            source,
            source_path=str(file_path),
            settings_overrides=DOCUTILS_SETTINGS,
        )
        visitor = FrontMatterVisitor(doctree)
        doctree.walk(visitor)

        title = visitor.title or visitor.front_matter.get("title")
        if not title or not isinstance(title, str):
            # Fallback to filename if no title found
            title = self._title_from_path(file_path)

        return ParsedPage(
            title=title,
            html=self._render_body(source, file_path),
            front_matter=visitor.front_matter,
        )

    @staticmethod
    def _render_body(source: str, file_path: Path) -> str:
        """Render the HTML body fragment, without title and docinfo.

        Args:
            source: reST source text.
            file_path: Path of the source.

        Returns:
            HTML fragment.
        """
        parts = docutils.core.publish_parts(
            source,
            source_path=str(file_path),
            writer_name="html5",
            settings_overrides=DOCUTILS_SETTINGS,
        )
        return str(parts["fragment"])

    @staticmethod
    def _title_from_path(file_path: Path) -> str:
        stem = file_path.stem
        if stem == "index" and file_path.parent.name:
            stem = file_path.parent.name
        # Drop a numeric ordering prefix such as "02."
        stem = stem.split(".", 1)[-1] if stem.split(".", 1)[0].isdigit() else stem
        return stem.replace("-", " ").replace("_", " ").title()
