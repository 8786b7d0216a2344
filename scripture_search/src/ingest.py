"""
Startup orchestrator.

Runs once per process:
1. Warm start: restore the VerseIndex from the index cache
2. Cold start: load document -> build VerseIndex -> save to cache

Progress is published on a status channel so a presentation layer
can show "Downloading…", "Processing…" and "Ready to search." and
only enable queries once ingestion has completed. The index is
assigned only after a build succeeds, so queries never observe a
partially built index.
"""

import asyncio
import logging
from enum import Enum
from pathlib import PurePosixPath
from typing import Callable, Optional
from urllib.parse import urlparse

import httpx

from ..config.settings import Settings, get_settings
from .build_index import build_verse_index
from .errors import IndexNotReady
from .fetch import load_document
from .index_cache import FileStore, IndexCache
from .retrieval import (
    SearchResult,
    get_front_matter,
    get_verse,
    highlight,
    search,
    suggest,
)
from .schemas.index import VerseIndex
from .schemas.verse import Verse

logger = logging.getLogger(__name__)


class Status(str, Enum):
    """Ingestion status shown to the user."""

    IDLE = "Idle."
    DOWNLOADING = "Downloading…"
    PROCESSING = "Processing…"
    READY = "Ready to search."
    ERROR = "Error loading text."


StatusListener = Callable[[Status, str], None]


class IngestResult:
    """Result of a startup ingestion."""

    def __init__(
        self,
        index: VerseIndex,
        version: str,
        from_cache: bool,
        persisted: bool,
    ):
        self.index = index
        self.version = version
        self.from_cache = from_cache
        self.persisted = persisted

    @property
    def num_verses(self) -> int:
        return len(self.index.verses)

    @property
    def num_words(self) -> int:
        return len(self.index.vocabulary)

    def __repr__(self) -> str:
        return (
            f"IngestResult(version={self.version!r}, "
            f"verses={self.num_verses}, "
            f"words={self.num_words}, "
            f"from_cache={self.from_cache}, "
            f"persisted={self.persisted})"
        )


def _source_name(source: str) -> str:
    path = urlparse(source).path or source
    return PurePosixPath(path).name or source


class VerseSearch:
    """
    Owns the VerseIndex for one process and exposes the query interface.

    Usage:
        engine = VerseSearch()
        engine.subscribe(lambda status, detail: print(status.value))
        await engine.start()
        result = engine.search("wherefore")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[IndexCache] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache or IndexCache(FileStore(self.settings.cache_dir))
        self._client = client

        self._index: Optional[VerseIndex] = None
        self._result: Optional[IngestResult] = None
        self._lock = asyncio.Lock()
        self._listeners: list[StatusListener] = []
        self.status = Status.IDLE
        self.status_detail = ""

    # Status channel

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a status listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, status: Status, detail: str = "") -> None:
        self.status = status
        self.status_detail = detail
        for listener in list(self._listeners):
            listener(status, detail)

    @property
    def status_message(self) -> str:
        """Human-readable status line."""
        if self.status == Status.ERROR:
            name = _source_name(self.settings.document_source)
            return f"{Status.ERROR.value} Ensure {name} is present."
        return self.status.value

    # Ingestion

    async def start(self, rebuild: bool = False) -> IngestResult:
        """
        Make the index available, from cache or by ingesting the document.

        Calls after a successful start return the existing result unless
        ``rebuild`` is set. Concurrent calls are serialized.

        Args:
            rebuild: Ignore the cached index and ingest again

        Raises:
            DocumentUnavailable: the document could not be loaded
        """
        async with self._lock:
            if self._result is not None and not rebuild:
                return self._result

            try:
                result = await self._ingest(use_cache=not rebuild)
            except Exception as e:
                logger.error(f"Ingestion failed: {e}")
                self._publish(Status.ERROR, str(e))
                raise

            self._index = result.index
            self._result = result
            self._publish(Status.READY)
            return result

    async def _ingest(self, use_cache: bool) -> IngestResult:
        version = self.settings.index_version

        if use_cache:
            cached = self.cache.load(version)
            if cached is not None:
                return IngestResult(cached, version, from_cache=True, persisted=True)

        self._publish(Status.DOWNLOADING, self.settings.document_source)
        raw = await load_document(
            self.settings.document_source,
            timeout=self.settings.request_timeout,
            client=self._client,
        )

        self._publish(Status.PROCESSING)
        index = await asyncio.to_thread(
            build_verse_index,
            raw,
            strategy=self.settings.split_strategy,
            marker=self.settings.front_matter_marker,
            line_count=self.settings.front_matter_lines,
            min_verse_length=self.settings.min_verse_length,
            min_word_length=self.settings.min_word_length,
        )

        persisted = self.cache.save(index, version)
        return IngestResult(index, version, from_cache=False, persisted=persisted)

    # Query interface

    @property
    def is_ready(self) -> bool:
        return self._index is not None

    @property
    def index(self) -> VerseIndex:
        if self._index is None:
            raise IndexNotReady()
        return self._index

    def suggest(self, prefix: str) -> list[str]:
        return suggest(
            self.index,
            prefix,
            limit=self.settings.suggestion_limit,
            min_prefix=self.settings.min_prefix_length,
        )

    def search(self, query: str) -> Optional[SearchResult]:
        return search(self.index, query, limit=self.settings.search_limit)

    def get_verse(self, verse_id: int) -> Optional[Verse]:
        return get_verse(self.index, verse_id)

    def get_front_matter(self) -> str:
        return get_front_matter(self.index)

    def highlight(self, verse: Verse, query: str, open_tag: str = "<b>", close_tag: str = "</b>") -> str:
        return highlight(verse.text, query, open_tag, close_tag)
