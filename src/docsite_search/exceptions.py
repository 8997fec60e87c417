"""Exceptions raised by the documentation search package."""


class DocSearchError(Exception):
    """Base class for documentation search errors."""


class ValidationError(DocSearchError, ValueError):
    """Raised when a query or pagination option is rejected."""


class UnknownVersionError(DocSearchError, ValueError):
    """Raised when a version is not among the configured versions."""


class CacheBackendError(DocSearchError):
    """Raised by cache backends when the underlying store fails."""


class CorpusError(DocSearchError):
    """Raised when the documentation corpus cannot be read."""
