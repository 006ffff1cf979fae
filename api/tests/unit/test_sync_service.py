"""
Tests del driver de sincronización TvMazeCatalogSync.

Se usa un cliente TVMaze falso (páginas en memoria) y el repositorio real
sobre SQLite en memoria para verificar:
- reanudación idempotente
- sin personas ni asociaciones duplicadas
- progreso monótono
- backoff ante 429 y fin de catálogo limpio
- parada fatal ante errores de persistencia o no clasificados
"""
from __future__ import annotations

import asyncio
from datetime import date
from typing import Dict, List, Optional

import pytest
from sqlalchemy import select

from app.domain.entities.catalog import CastEntry, Show
from app.domain.repositories.catalog_repository import CatalogPersistenceError
from app.infrastructure.database.models import PersonModel, show_cast
from app.infrastructure.external.tvmaze_sync.backoff import RateLimitBackoff
from app.infrastructure.external.tvmaze_sync.sync_config import ScraperConfig
from app.infrastructure.external.tvmaze_sync.sync_service import TvMazeCatalogSync
from app.infrastructure.external.tvmaze_sync.tvmaze_client import (
    RateLimitedError,
    TvMazeApiError,
)


PAGE_SIZE = 3


class _FakeTvMazeClient:
    """Cliente falso: páginas de shows y repartos en memoria."""

    def __init__(
        self,
        pages: Dict[int, List[Show]],
        casts: Dict[int, List[CastEntry]],
        rate_limits: Optional[Dict[str, int]] = None,
        cast_errors: Optional[Dict[int, Exception]] = None,
    ) -> None:
        self.pages = pages
        self.casts = casts
        self.rate_limits = dict(rate_limits or {})
        self.cast_errors = cast_errors or {}
        self.requested_pages: List[int] = []
        self.requested_casts: List[int] = []
        self.closed = False

    def _maybe_rate_limit(self, key: str) -> None:
        remaining = self.rate_limits.get(key, 0)
        if remaining > 0:
            self.rate_limits[key] = remaining - 1
            raise RateLimitedError(key)

    async def list_shows_on_page(self, page: int) -> Optional[List[Show]]:
        self.requested_pages.append(page)
        self._maybe_rate_limit(f"page:{page}")
        return self.pages.get(page)

    async def list_cast_for_show(self, show_id: int) -> List[CastEntry]:
        self.requested_casts.append(show_id)
        self._maybe_rate_limit(f"cast:{show_id}")
        if show_id in self.cast_errors:
            raise self.cast_errors[show_id]
        return list(self.casts.get(show_id, []))

    async def aclose(self) -> None:
        self.closed = True


class _RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float, stop_event: Optional[asyncio.Event] = None) -> bool:
        self.delays.append(seconds)
        return not (stop_event is not None and stop_event.is_set())


class _RecordingRepository:
    """Envuelve el repositorio real registrando el orden de commits."""

    def __init__(self, inner, fail_on_commit: Optional[int] = None) -> None:
        self._inner = inner
        self.committed: List[int] = []
        self.attempted: List[int] = []
        self._fail_on_commit = fail_on_commit

    async def highest_show_id(self):
        return await self._inner.highest_show_id()

    async def find_people_by_ids(self, ids):
        return await self._inner.find_people_by_ids(ids)

    async def commit_show(self, show, members):
        self.attempted.append(show.id)
        if self._fail_on_commit is not None and len(self.attempted) == self._fail_on_commit:
            raise CatalogPersistenceError(f"Error guardando el show {show.id}: disco lleno")
        await self._inner.commit_show(show, members)
        self.committed.append(show.id)

    async def list_shows(self, skip=0, limit=10):
        return await self._inner.list_shows(skip, limit)


def _catalog():
    """Tres páginas (0..2) de tamaño 3 con personas compartidas entre shows."""
    pages = {
        0: [Show(1, "Uno"), Show(2, "Dos"), Show(3, "Tres")],
        1: [Show(4, "Cuatro"), Show(5, "Cinco")],
        2: [Show(7, "Siete"), Show(8, "Ocho")],
    }
    casts = {
        1: [CastEntry(100, "Ana", date(1980, 1, 1)), CastEntry(101, "Beto")],
        2: [CastEntry(100, "Ana", date(1980, 1, 1)), CastEntry(100, "Ana", date(1980, 1, 1))],
        3: [],
        4: [CastEntry(101, "Beto"), CastEntry(102, "Caro")],
        5: [CastEntry(103, "Dani")],
        7: [CastEntry(100, "Ana", date(1980, 1, 1)), CastEntry(104, "Eva")],
        8: [CastEntry(104, "Eva"), CastEntry(105, "Fede")],
    }
    return pages, casts


def _sync(repo, client, *, enabled=True, delay_ms=0, sleep=None) -> TvMazeCatalogSync:
    sleep = sleep or _RecordingSleep()
    return TvMazeCatalogSync(
        repository=repo,
        client=client,
        config=ScraperConfig(enabled=enabled, request_delay_ms=delay_ms, index_page_size=PAGE_SIZE),
        backoff=RateLimitBackoff(sleep=sleep),
        sleep=sleep,
    )


async def _snapshot(session_factory):
    async with session_factory() as session:
        people = (await session.execute(select(PersonModel.id).order_by(PersonModel.id))).scalars().all()
        pairs = (await session.execute(
            select(show_cast.c.show_id, show_cast.c.person_id).order_by(show_cast.c.show_id, show_cast.c.person_id)
        )).all()
    return list(people), [tuple(p) for p in pairs]


@pytest.mark.asyncio
async def test_full_run_commits_every_show_and_stops_at_end_of_catalog(catalog_repository, session_factory) -> None:
    pages, casts = _catalog()
    client = _FakeTvMazeClient(pages, casts)
    repo = _RecordingRepository(catalog_repository)

    result = await _sync(repo, client).run()

    assert result.end_of_catalog is True
    assert result.stopped is False
    assert result.shows_committed == 7
    assert result.last_show_id == 8
    assert result.pages_fetched == 3
    assert client.requested_pages == [0, 1, 2, 3]
    assert repo.committed == [1, 2, 3, 4, 5, 7, 8]


@pytest.mark.asyncio
async def test_no_duplicate_people_or_associations(catalog_repository, session_factory) -> None:
    pages, casts = _catalog()

    await _sync(catalog_repository, _FakeTvMazeClient(pages, casts)).run()

    people, pairs = await _snapshot(session_factory)
    assert people == [100, 101, 102, 103, 104, 105]
    assert len(pairs) == len(set(pairs))
    assert (2, 100) in pairs
    assert [p for p in pairs if p[0] == 2] == [(2, 100)]


@pytest.mark.asyncio
async def test_second_run_is_idempotent(catalog_repository, session_factory) -> None:
    pages, casts = _catalog()
    await _sync(catalog_repository, _FakeTvMazeClient(pages, casts)).run()
    first = await _snapshot(session_factory)

    repo = _RecordingRepository(catalog_repository)
    client = _FakeTvMazeClient(pages, casts)
    result = await _sync(repo, client).run()

    assert result.shows_committed == 0
    assert repo.committed == []
    assert client.requested_casts == []
    # Reanuda en la página del último show (8 // 3 = 2)
    assert client.requested_pages == [2, 3]
    assert await _snapshot(session_factory) == first


@pytest.mark.asyncio
async def test_resume_after_interruption_matches_single_run(catalog_repository, session_factory) -> None:
    pages, casts = _catalog()

    # Primera corrida interrumpida por un error fatal en el cast del show 5.
    failing = _FakeTvMazeClient(pages, casts, cast_errors={5: TvMazeApiError("timeout")})
    with pytest.raises(TvMazeApiError):
        await _sync(catalog_repository, failing).run()
    assert await catalog_repository.highest_show_id() == 4

    repo = _RecordingRepository(catalog_repository)
    client = _FakeTvMazeClient(pages, casts)
    await _sync(repo, client).run()

    # 4 // 3 = 1: reanuda en la página 1 y solo procesa los shows > 4
    assert client.requested_pages[0] == 1
    assert repo.committed == [5, 7, 8]

    people, pairs = await _snapshot(session_factory)
    assert people == [100, 101, 102, 103, 104, 105]
    assert len(pairs) == len(set(pairs)) == 10


@pytest.mark.asyncio
async def test_progress_is_strictly_increasing_even_with_unsorted_page(catalog_repository) -> None:
    pages = {0: [Show(3, "Tres"), Show(1, "Uno"), Show(2, "Dos"), Show(2, "Dos otra vez")]}
    repo = _RecordingRepository(catalog_repository)

    await _sync(repo, _FakeTvMazeClient(pages, {})).run()

    assert repo.committed == [1, 2, 3]


@pytest.mark.asyncio
async def test_rate_limited_calls_wait_and_succeed_without_duplicates(catalog_repository, session_factory) -> None:
    pages, casts = _catalog()
    client = _FakeTvMazeClient(pages, casts, rate_limits={"cast:4": 3, "page:2": 1})
    sleep = _RecordingSleep()
    repo = _RecordingRepository(catalog_repository)

    result = await _sync(repo, client, sleep=sleep).run()

    assert result.end_of_catalog is True
    assert sleep.delays == [2, 4, 8, 2]
    assert client.requested_casts.count(4) == 4
    assert repo.committed == [1, 2, 3, 4, 5, 7, 8]
    people, pairs = await _snapshot(session_factory)
    assert len(pairs) == len(set(pairs))


@pytest.mark.asyncio
async def test_end_of_catalog_commits_all_previous_pages(catalog_repository) -> None:
    pages, casts = _catalog()
    del pages[2]

    result = await _sync(catalog_repository, _FakeTvMazeClient(pages, casts)).run()

    assert result.end_of_catalog is True
    assert result.last_show_id == 5
    assert await catalog_repository.highest_show_id() == 5


@pytest.mark.asyncio
async def test_persistence_failure_halts_after_previous_shows(catalog_repository) -> None:
    pages, casts = _catalog()
    client = _FakeTvMazeClient(pages, casts)
    repo = _RecordingRepository(catalog_repository, fail_on_commit=3)

    with pytest.raises(CatalogPersistenceError):
        await _sync(repo, client).run()

    assert repo.committed == [1, 2]
    assert repo.attempted == [1, 2, 3]
    assert 4 not in client.requested_casts
    assert await catalog_repository.highest_show_id() == 2


@pytest.mark.asyncio
async def test_unclassified_failure_is_fatal_and_not_retried(catalog_repository) -> None:
    pages, casts = _catalog()
    client = _FakeTvMazeClient(pages, casts, cast_errors={2: TvMazeApiError("500", status_code=500)})
    repo = _RecordingRepository(catalog_repository)

    with pytest.raises(TvMazeApiError):
        await _sync(repo, client).run()

    assert client.requested_casts == [1, 2]
    assert repo.committed == [1]


@pytest.mark.asyncio
async def test_disabled_engine_does_nothing(catalog_repository) -> None:
    client = _FakeTvMazeClient(*_catalog())

    result = await _sync(catalog_repository, client, enabled=False).run()

    assert result.enabled is False
    assert client.requested_pages == []
    assert await catalog_repository.highest_show_id() is None


@pytest.mark.asyncio
async def test_request_delay_is_applied_after_each_show(catalog_repository) -> None:
    pages = {0: [Show(1, "Uno"), Show(2, "Dos")]}
    sleep = _RecordingSleep()

    await _sync(catalog_repository, _FakeTvMazeClient(pages, {}), delay_ms=250, sleep=sleep).run()

    assert sleep.delays == [0.25, 0.25]


@pytest.mark.asyncio
async def test_stop_event_set_before_run_fetches_nothing(catalog_repository) -> None:
    client = _FakeTvMazeClient(*_catalog())
    stop_event = asyncio.Event()
    stop_event.set()

    result = await _sync(catalog_repository, client).run(stop_event)

    assert result.stopped is True
    assert client.requested_pages == []


@pytest.mark.asyncio
async def test_stop_during_pacing_finishes_current_show_only(catalog_repository) -> None:
    pages, casts = _catalog()
    client = _FakeTvMazeClient(pages, casts)
    stop_event = asyncio.Event()

    async def stop_after_first_show(seconds, event=None):
        stop_event.set()
        return False

    sync = TvMazeCatalogSync(
        repository=catalog_repository,
        client=client,
        config=ScraperConfig(request_delay_ms=100, index_page_size=PAGE_SIZE),
        sleep=stop_after_first_show,
    )
    result = await sync.run(stop_event)

    assert result.stopped is True
    assert result.shows_committed == 1
    assert client.requested_pages == [0]
    assert await catalog_repository.highest_show_id() == 1


@pytest.mark.asyncio
async def test_stop_during_backoff_is_clean(catalog_repository) -> None:
    pages, casts = _catalog()
    client = _FakeTvMazeClient(pages, casts, rate_limits={"cast:2": 100})
    stop_event = asyncio.Event()

    async def stop_on_wait(seconds, event=None):
        stop_event.set()
        return False

    sync = TvMazeCatalogSync(
        repository=catalog_repository,
        client=client,
        config=ScraperConfig(request_delay_ms=0, index_page_size=PAGE_SIZE),
        backoff=RateLimitBackoff(sleep=stop_on_wait),
    )
    result = await sync.run(stop_event)

    assert result.stopped is True
    assert result.shows_committed == 1
    assert await catalog_repository.highest_show_id() == 1


@pytest.mark.asyncio
async def test_aclose_closes_client(catalog_repository) -> None:
    client = _FakeTvMazeClient({}, {})

    await _sync(catalog_repository, client).aclose()

    assert client.closed is True


class _SlowCastClient(_FakeTvMazeClient):
    """El reparto del show indicado tarda mucho más que la parada."""

    def __init__(self, pages, casts, slow_show_id: int, delay_s: float = 5.0) -> None:
        super().__init__(pages, casts)
        self.slow_show_id = slow_show_id
        self.delay_s = delay_s
        self.cancelled_calls = 0

    async def list_cast_for_show(self, show_id: int) -> List[CastEntry]:
        if show_id == self.slow_show_id:
            try:
                await asyncio.sleep(self.delay_s)
            except asyncio.CancelledError:
                self.cancelled_calls += 1
                raise
        return await super().list_cast_for_show(show_id)


@pytest.mark.asyncio
async def test_stop_aborts_in_flight_request_without_committing(catalog_repository) -> None:
    pages, casts = _catalog()
    client = _SlowCastClient(pages, casts, slow_show_id=2)
    repo = _RecordingRepository(catalog_repository)
    stop_event = asyncio.Event()
    asyncio.get_running_loop().call_later(0.1, stop_event.set)

    loop = asyncio.get_running_loop()
    started = loop.time()
    result = await asyncio.wait_for(_sync(repo, client).run(stop_event), timeout=2)
    elapsed = loop.time() - started

    assert elapsed < 1.0
    assert result.stopped is True
    assert client.cancelled_calls == 1
    assert repo.attempted == [1]
    assert await catalog_repository.highest_show_id() == 1


class _BrokenCursorRepository(_RecordingRepository):
    async def highest_show_id(self):
        raise CatalogPersistenceError("No se pudo leer el ultimo show: tabla inexistente")


@pytest.mark.asyncio
async def test_cursor_read_failure_is_logged_as_persistence_error(catalog_repository) -> None:
    from loguru import logger

    messages: List[str] = []
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="ERROR")
    client = _FakeTvMazeClient(*_catalog())
    try:
        with pytest.raises(CatalogPersistenceError):
            await _sync(_BrokenCursorRepository(catalog_repository), client).run()
    finally:
        logger.remove(sink_id)

    assert any("base de datos" in m for m in messages)
    assert client.requested_pages == []
