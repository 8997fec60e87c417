"""Cache backends and the per-version search index cache."""

import json
import logging
import sqlite3
import threading
import time
from collections.abc import Callable, Generator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from docsite_search.config import Settings
from docsite_search.exceptions import CacheBackendError
from docsite_search.models import IndexedPage

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheBackend(Protocol):
    """Generic TTL key-value store.

    Backends should raise ``CacheBackendError`` on storage failures. The index
    cache treats any exception from a backend as a miss or a skipped write.
    """

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or None when absent or expired."""
        ...

    def put(self, key: str, value: bytes, ttl: int) -> None:
        """Store a value for ``ttl`` seconds, replacing any previous value."""
        ...

    def forget(self, key: str) -> None:
        """Remove a value if present."""
        ...


class MemoryCache:
    """In-process cache backend.

    Each entry is an immutable ``(expires_at, value)`` tuple replaced by
    reference, so a reader sees either the previous or the new value.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        """Initialise an empty cache.

        Args:
            clock: Source of the current time in seconds.
        """
        self._clock = clock
        self._entries: dict[str, tuple[float, bytes]] = {}
        self._write_lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            return None
        return value

    def put(self, key: str, value: bytes, ttl: int) -> None:
        with self._write_lock:
            self._entries[key] = (self._clock() + ttl, value)

    def forget(self, key: str) -> None:
        with self._write_lock:
            self._entries.pop(key, None)


class SQLiteCache:
    """Cache backend persisting entries in a SQLite database."""

    def __init__(self, db_path: Path, clock: Clock = time.time) -> None:
        """Initialise cache with the given database path.

        Args:
            db_path: Path to the SQLite database file.
            clock: Source of the current wall-clock time in seconds.

        Raises:
            CacheBackendError: If the schema cannot be created.
        """
        self.db_path = db_path
        self._clock = clock
        self._initialise_schema()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections.

        Yields:
            SQLite connection.

        Raises:
            CacheBackendError: If SQLite reports an error.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            msg = f"Cannot open cache database {self.db_path}: {exc}"
            raise CacheBackendError(msg) from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            msg = f"Cache database error: {exc}"
            raise CacheBackendError(msg) from exc
        finally:
            conn.close()

    def _initialise_schema(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    expires_at REAL NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_cache_entries_expires ON cache_entries(expires_at);
            """)
            conn.commit()

    def get(self, key: str) -> bytes | None:
        """Return a fresh value.

        Args:
            key: Cache key.

        Returns:
            Stored bytes, or None when missing or expired.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT value FROM cache_entries WHERE key = ? AND expires_at > ?",
                (key, self._clock()),
            )
            row = cursor.fetchone()
            return bytes(row[0]) if row else None

    def put(self, key: str, value: bytes, ttl: int) -> None:
        """Insert or replace a value.

        Args:
            key: Cache key.
            value: Bytes to store.
            ttl: Lifetime in seconds.
        """
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO cache_entries (key, value, expires_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (key, value, self._clock() + ttl),
            )
            conn.commit()

    def forget(self, key: str) -> None:
        """Delete a value.

        Args:
            key: Cache key.
        """
        with self._get_connection() as conn:
            conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
            conn.commit()


def encode_pages(pages: Sequence[IndexedPage]) -> bytes:
    """Serialise an index for storage.

    Args:
        pages: Indexed pages in index order.

    Returns:
        UTF-8 JSON payload.
    """
    return json.dumps([page.to_dict() for page in pages], ensure_ascii=False).encode("utf-8")


def decode_pages(payload: bytes) -> tuple[IndexedPage, ...]:
    """Deserialise an index produced by ``encode_pages``.

    Args:
        payload: UTF-8 JSON payload.

    Returns:
        Indexed pages in index order.

    Raises:
        ValueError: If the payload is not a valid index.
    """
    try:
        items = json.loads(payload.decode("utf-8"))
        return tuple(IndexedPage(**item) for item in items)
    except (UnicodeDecodeError, json.JSONDecodeError, TypeError) as exc:
        msg = f"Invalid index payload: {exc}"
        raise ValueError(msg) from exc


class IndexCache:
    """Stores built indexes per version and rebuilds them on a miss."""

    def __init__(
        self,
        backend: CacheBackend,
        settings: Settings,
        rebuild: Callable[[str], Sequence[IndexedPage]],
    ) -> None:
        """Initialise index cache.

        Args:
            backend: Key-value store holding serialised indexes.
            settings: Search settings (cache policy, key format, versions).
            rebuild: Builds the index of a version from the corpus.
        """
        self.backend = backend
        self.settings = settings
        self.rebuild = rebuild

    @property
    def enabled(self) -> bool:
        return self.settings.index.enabled

    def get(self, version: str) -> tuple[IndexedPage, ...]:
        """Return the index of a version, rebuilding it when not cached.

        Backend failures and undecodable payloads count as a miss.

        Args:
            version: Resolved version identifier.

        Returns:
            Indexed pages in index order.
        """
        if not self.enabled:
            return tuple(self.rebuild(version))

        key = self.settings.cache_key(version)
        try:
            payload = self.backend.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for %s, rebuilding: %s", key, exc)
            payload = None

        if payload is not None:
            try:
                pages = decode_pages(payload)
            except ValueError as exc:
                logger.warning("Discarding cached index %s: %s", key, exc)
            else:
                logger.debug("Cache hit for %s (%d pages)", key, len(pages))
                return pages

        logger.info("Search index for version %s not cached, rebuilding", version)
        pages = tuple(self.rebuild(version))
        self.put(version, pages)
        return pages

    def put(self, version: str, pages: Sequence[IndexedPage], ttl: int | None = None) -> None:
        """Replace the cached index of a version.

        Args:
            version: Resolved version identifier.
            pages: Complete index of the version.
            ttl: Lifetime in seconds, the configured index TTL when omitted.
        """
        if not self.enabled:
            return
        key = self.settings.cache_key(version)
        try:
            self.backend.put(key, encode_pages(pages), ttl if ttl is not None else self.settings.index.ttl)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    def clear(self, version: str | None = None) -> None:
        """Evict cached indexes.

        Args:
            version: Version to evict, or None for every configured version.
        """
        if not self.enabled:
            return
        versions = list(self.settings.versions.available) if version is None else [version]
        for version_id in versions:
            key = self.settings.cache_key(version_id)
            try:
                self.backend.forget(key)
            except Exception as exc:
                logger.warning("Cache eviction failed for %s: %s", key, exc)
            else:
                logger.debug("Evicted %s", key)
