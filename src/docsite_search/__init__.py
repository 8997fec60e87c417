"""Documentation site search: per-version page index, weighted matching and pagination."""

from docsite_search.config import Settings
from docsite_search.exceptions import CacheBackendError, DocSearchError, UnknownVersionError, ValidationError
from docsite_search.models import IndexedPage, SearchResponse, SearchResult
from docsite_search.service import SearchService, create_service

__all__ = [
    "CacheBackendError",
    "DocSearchError",
    "IndexedPage",
    "SearchResponse",
    "SearchResult",
    "SearchService",
    "Settings",
    "UnknownVersionError",
    "ValidationError",
    "create_service",
]
