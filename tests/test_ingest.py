"""Tests for the startup orchestrator and status channel."""

import asyncio

import pytest

from scripture_search.config.settings import Settings
from scripture_search.src.errors import DocumentUnavailable, IndexNotReady
from scripture_search.src.index_cache import FileStore, IndexCache, MemoryStore
from scripture_search.src.ingest import Status, VerseSearch

SAMPLE_DOCUMENT = (
    "The Project Gutenberg eBook of a test\n\n"
    "License: use freely.\n\n"
    "THE FIRST BOOK OF NEPHI\n\n"
    "1 Nephi 1:1\nI, Nephi, having been born of goodly parents, therefore I was taught.\n\n"
    "1 Nephi 3:7\nAnd it came to pass that I, Nephi, said unto my father: I will go and do.\n\n"
    "Short line\n"
)


@pytest.fixture
def document(tmp_path):
    path = tmp_path / "bom.txt"
    path.write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def settings(document, tmp_path):
    return Settings(
        _env_file=None,
        document_source=str(document),
        cache_dir=tmp_path / "cache",
        index_version="test_v1",
    )


def record_statuses(engine: VerseSearch) -> list[Status]:
    statuses: list[Status] = []
    engine.subscribe(lambda status, detail: statuses.append(status))
    return statuses


class TestColdStart:
    """Tests for ingestion from the document."""

    @pytest.mark.asyncio
    async def test_builds_and_caches(self, settings):
        engine = VerseSearch(settings=settings)
        statuses = record_statuses(engine)

        result = await engine.start()

        assert statuses == [Status.DOWNLOADING, Status.PROCESSING, Status.READY]
        assert not result.from_cache
        assert result.persisted
        assert result.num_verses == 3
        assert engine.is_ready
        assert engine.status_message == "Ready to search."
        assert (settings.cache_dir / "test_v1.json").exists()

    @pytest.mark.asyncio
    async def test_queries_after_ready(self, settings):
        engine = VerseSearch(settings=settings)
        await engine.start()

        assert engine.suggest("ne") == ["nephi"]
        result = engine.search("goodly")
        assert [v.reference for v in result.verses] == ["1 Nephi 1:1"]
        assert engine.highlight(result.verses[0], "goodly").count("<b>goodly</b>") == 1
        assert engine.get_verse(2).reference == "1 Nephi 3:7"
        assert engine.get_front_matter().startswith("The Project Gutenberg")

    @pytest.mark.asyncio
    async def test_persistence_failure_does_not_block(self, settings):
        """A full store still yields a ready index."""
        engine = VerseSearch(settings=settings, cache=IndexCache(MemoryStore(quota_bytes=16)))
        result = await engine.start()

        assert not result.persisted
        assert engine.is_ready
        assert engine.status == Status.READY

    @pytest.mark.asyncio
    async def test_unusable_version_key_still_ready(self, settings):
        """A version that cannot name a cache record only skips caching."""
        unusable = settings.model_copy(update={"index_version": "bom data v5"})
        engine = VerseSearch(settings=unusable)

        result = await engine.start()

        assert not result.from_cache
        assert not result.persisted
        assert result.num_verses == 3
        assert engine.status == Status.READY
        assert not settings.cache_dir.exists() or list(settings.cache_dir.iterdir()) == []


class TestWarmStart:
    """Tests for loading from the cache."""

    @pytest.mark.asyncio
    async def test_cache_short_circuits(self, settings, document):
        await VerseSearch(settings=settings).start()
        document.unlink()

        engine = VerseSearch(settings=settings)
        statuses = record_statuses(engine)
        result = await engine.start()

        assert result.from_cache
        assert statuses == [Status.READY]
        assert engine.search("goodly").count == 1

    @pytest.mark.asyncio
    async def test_version_bump_reingests(self, settings):
        await VerseSearch(settings=settings).start()

        bumped = settings.model_copy(update={"index_version": "test_v2"})
        result = await VerseSearch(settings=bumped).start()

        assert not result.from_cache
        assert (settings.cache_dir / "test_v2.json").exists()

    @pytest.mark.asyncio
    async def test_corrupt_cache_reingests(self, settings):
        store = FileStore(settings.cache_dir)
        store.set("test_v1", "{corrupt")

        result = await VerseSearch(settings=settings).start()

        assert not result.from_cache
        assert result.persisted
        assert IndexCache(store).load("test_v1") is not None

    @pytest.mark.asyncio
    async def test_rebuild_ignores_cache(self, settings):
        engine = VerseSearch(settings=settings)
        await engine.start()
        result = await engine.start(rebuild=True)
        assert not result.from_cache


class TestFailures:
    """Tests for unavailable documents and premature queries."""

    @pytest.mark.asyncio
    async def test_missing_document(self, settings, tmp_path):
        missing = settings.model_copy(update={"document_source": str(tmp_path / "missing.txt")})
        engine = VerseSearch(settings=missing)
        statuses = record_statuses(engine)

        with pytest.raises(DocumentUnavailable):
            await engine.start()

        assert statuses[-1] == Status.ERROR
        assert engine.status_message == "Error loading text. Ensure missing.txt is present."
        assert not engine.is_ready
        with pytest.raises(IndexNotReady):
            engine.search("nephi")

    def test_query_before_start(self, settings):
        engine = VerseSearch(settings=settings)
        assert engine.status == Status.IDLE
        with pytest.raises(IndexNotReady):
            engine.suggest("ne")


class TestStartOnce:
    """Tests for single ingestion per process."""

    @pytest.mark.asyncio
    async def test_second_start_reuses_result(self, settings):
        engine = VerseSearch(settings=settings)
        first = await engine.start()
        second = await engine.start()
        assert first is second

    @pytest.mark.asyncio
    async def test_concurrent_starts_ingest_once(self, settings):
        engine = VerseSearch(settings=settings)
        statuses = record_statuses(engine)

        first, second = await asyncio.gather(engine.start(), engine.start())

        assert first is second
        assert statuses.count(Status.DOWNLOADING) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self, settings):
        engine = VerseSearch(settings=settings)
        statuses: list[Status] = []
        unsubscribe = engine.subscribe(lambda status, detail: statuses.append(status))
        unsubscribe()

        await engine.start()
        assert statuses == []
