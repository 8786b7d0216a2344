"""
Versioned persistence of the VerseIndex.

The index is stored as one JSON record under a literal version key
(e.g. "bom_data_v5"). Bumping the version is the only invalidation
mechanism: records are never migrated, a missing or malformed record
simply means the document is ingested again.

Persistence is best-effort. A failed write is logged and reported as
False; it never aborts ingestion.
"""

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .errors import PersistenceUnavailable, StorageQuotaExceeded
from .schemas.index import VerseIndex

logger = logging.getLogger(__name__)

INDEX_VERSION = "bom_data_v5"

VALID_KEY = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def is_valid_key(key: str) -> bool:
    return VALID_KEY.match(key) is not None


def _check_key(key: str) -> str:
    if not is_valid_key(key):
        raise ValueError(f"Invalid store key: {key!r}")
    return key


class KeyValueStore(ABC):
    """String key-value storage for serialized index records."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value. Raises PersistenceUnavailable on failure."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if something was removed."""
        pass


class FileStore(KeyValueStore):
    """
    One JSON file per key inside a directory.

    Usage:
        store = FileStore(Path("~/.cache/scripture-search").expanduser())
        store.set("bom_data_v5", record)
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceUnavailable(f"Could not read {path}: {e}", key=key) from e

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file so readers never see a partial record
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceUnavailable(f"Could not write {path}: {e}", key=key) from e

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        if not path.exists():
            return False
        path.unlink()
        return True


class MemoryStore(KeyValueStore):
    """
    In-process store with an optional byte quota.

    Mirrors browser storage limits: a write that would push the total
    size past ``quota_bytes`` raises StorageQuotaExceeded.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def _size_without(self, key: str) -> int:
        return sum(
            len(value.encode("utf-8"))
            for existing_key, value in self._data.items()
            if existing_key != key
        )

    def get(self, key: str) -> Optional[str]:
        return self._data.get(_check_key(key))

    def set(self, key: str, value: str) -> None:
        _check_key(key)
        if self.quota_bytes is not None:
            total = self._size_without(key) + len(value.encode("utf-8"))
            if total > self.quota_bytes:
                raise StorageQuotaExceeded(key, total, self.quota_bytes)
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(_check_key(key), None) is not None

    def __contains__(self, key: str) -> bool:
        return key in self._data


class IndexCache:
    """
    Saves and restores a VerseIndex under a version key.

    ``load`` returns None for every recoverable condition (absent,
    malformed, unreadable); the caller re-ingests in that case.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def save(self, index: VerseIndex, version: str = INDEX_VERSION) -> bool:
        """
        Persist the index. Returns False (and logs) if storage failed.
        """
        if not is_valid_key(version):
            logger.warning(f"Index not cached: {version!r} is not a usable cache key")
            return False

        try:
            self.store.set(version, index.to_record())
        except PersistenceUnavailable as e:
            logger.warning(f"Index not cached, will rebuild next time: {e}")
            return False

        logger.info(f"Cached index under {version!r} ({len(index.verses)} verses)")
        return True

    def load(self, version: str = INDEX_VERSION) -> Optional[VerseIndex]:
        """
        Restore the index stored under ``version``.

        Returns:
            VerseIndex, or None if absent, unreadable or malformed
        """
        if not is_valid_key(version):
            logger.warning(f"Ignoring cached index: {version!r} is not a usable cache key")
            return None

        try:
            record = self.store.get(version)
        except PersistenceUnavailable as e:
            logger.warning(f"Index cache unreadable: {e}")
            return None

        if record is None:
            logger.debug(f"No cached index under {version!r}")
            return None

        try:
            index = VerseIndex.from_record(record)
        except ValidationError as e:
            logger.warning(
                f"Discarding malformed index record {version!r}: "
                f"{e.error_count()} validation errors"
            )
            return None

        logger.info(f"Loaded cached index {version!r} ({len(index.verses)} verses)")
        return index

    def invalidate(self, version: str = INDEX_VERSION) -> bool:
        """Delete the record stored under ``version``."""
        if not is_valid_key(version):
            return False
        try:
            return self.store.delete(version)
        except OSError as e:
            logger.warning(f"Could not remove cached index {version!r}: {e}")
            return False
