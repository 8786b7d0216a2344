"""Exceptions for scripture search."""

from typing import Optional


class ScriptureSearchError(Exception):
    """Base exception for scripture search errors."""


class DocumentUnavailable(ScriptureSearchError):
    """Raised when the source document cannot be read or fetched."""

    def __init__(self, message: str, source: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class ParseAnomaly(ScriptureSearchError):
    """
    An expected structure was not found in the document.

    Never raised to callers: the splitter and normalizer always fall
    back to a documented default and only log the anomaly.
    """


class PersistenceUnavailable(ScriptureSearchError):
    """Raised by a store when an index record cannot be read or written."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class StorageQuotaExceeded(PersistenceUnavailable):
    """Raised when a write would exceed the store's capacity."""

    def __init__(self, key: str, size: int, quota: int):
        super().__init__(
            f"Storing {size} bytes under {key!r} exceeds quota of {quota} bytes",
            key=key,
        )
        self.size = size
        self.quota = quota


class IndexNotReady(ScriptureSearchError):
    """Raised when a query is made before ingestion has completed."""

    def __init__(self, message: str = "Index is not ready; await ingestion first"):
        super().__init__(message)
