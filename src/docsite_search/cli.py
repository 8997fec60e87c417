"""Command-line interface for building and querying the documentation search index."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError as SettingsError

from docsite_search.config import Settings
from docsite_search.exceptions import DocSearchError, UnknownVersionError, ValidationError
from docsite_search.service import SearchService, create_service

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Returns:
        Parser with ``index`` and ``search`` sub-commands.
    """
    parser = argparse.ArgumentParser(prog="docsite-search", description="Documentation search index tools")
    parser.add_argument("--config", type=Path, help="TOML configuration file")
    parser.add_argument("--docs-path", type=Path, help="Root directory of the documentation pages")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Build or rebuild the search index")
    index_parser.add_argument("--version", help="Documentation version to index (omit to index all versions)")
    index_parser.add_argument("--clear", action="store_true", help="Clear the search index before rebuilding")

    search_parser = subparsers.add_parser("search", help="Search the documentation")
    search_parser.add_argument("query", help="Search query, '*' and '?' act as wildcards")
    search_parser.add_argument("--version", help="Documentation version to search (defaults to latest)")
    search_parser.add_argument("--page", type=int, default=1, help="Page number (1-based)")
    search_parser.add_argument("--size", help="Results per page, or 'all'")

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {"docs_path": args.docs_path} if args.docs_path else {}
    if args.config:
        return Settings.from_toml(args.config, **overrides)
    return Settings(**overrides)


def run_index(service: SearchService, version: str | None, clear: bool) -> int:
    """Clear (optionally) and rebuild the index.

    Args:
        service: Search service.
        version: Version to index, or None for all versions.
        clear: Whether to clear the index first.

    Returns:
        Process exit code.
    """
    version_text = f"version {version}" if version is not None else "all versions"
    try:
        if clear:
            print("Clearing search index...")
            service.clear_index(version)
            print("Search index cleared.")

        print(f"Building search index for {version_text}...")
        count = service.build_index(version)
    except DocSearchError as exc:
        logger.debug("Index build failed", exc_info=True)
        print(f"Failed to build search index: {exc}", file=sys.stderr)
        return 1

    print(f"Search index built successfully. Indexed {count} pages.")
    return 0


def run_search(service: SearchService, args: argparse.Namespace) -> int:
    """Run a query and print the JSON response.

    Args:
        service: Search service.
        args: Parsed ``search`` arguments.

    Returns:
        Process exit code.
    """
    try:
        response = service.search(args.query, version=args.version, page=args.page, size=args.size)
    except DocSearchError as exc:
        logger.debug("Search failed", exc_info=True)
        print(json.dumps({"rows": [], "count": 0, "count_filtered": 0, "error": str(exc)}))
        # Invalid input exits with 2, anything else with 1
        return 2 if isinstance(exc, (ValidationError, UnknownVersionError)) else 1

    print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``docsite-search`` command.

    Args:
        argv: Command-line arguments, ``sys.argv[1:]`` when None.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        service = create_service(load_settings(args))
    except (SettingsError, ValueError, OSError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    if args.command == "index":
        return run_index(service, args.version, args.clear)
    return run_search(service, args)


if __name__ == "__main__":
    sys.exit(main())
