"""
Servicio de sincronización TVMaze -> base de datos.

Diseño (resumen):
- Cursor derivado: mayor ID de show persistido (0 si no hay shows)
- Página inicial = cursor // tamaño de página del índice remoto
- Por cada show con ID > cursor: reparto -> merge -> commit atómico -> pausa
- 404 en el índice = fin del catálogo (terminación normal)

Política de errores:
- 429: se reintenta indefinidamente (RateLimitBackoff), nunca llega aquí.
- CatalogPersistenceError: se registra como error y detiene el sync.
- Cualquier otro error: fatal, detiene el sync sin reintento. Como cada show
  se persiste completo o nada, el cursor siempre refleja estado consistente.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import Settings, settings as app_settings
from app.domain.repositories.catalog_repository import (
    CatalogPersistenceError,
    ICatalogRepository,
)
from app.infrastructure.repositories.catalog_repository_impl import SqlAlchemyCatalogRepository

from .backoff import RateLimitBackoff, Sleeper, SyncStoppedError, interruptible_sleep
from .catalog_merge import resolve_cast
from .sync_config import ScraperConfig
from .tvmaze_client import TvMazeClient


@dataclass(frozen=True)
class SyncResult:
    shows_committed: int
    last_show_id: int
    pages_fetched: int
    end_of_catalog: bool = False
    stopped: bool = False
    enabled: bool = True


class TvMazeCatalogSync:
    """
    Orquestador del pipeline (un solo worker, sin paralelismo interno).
    """

    def __init__(
        self,
        *,
        repository: ICatalogRepository,
        client: TvMazeClient,
        config: ScraperConfig,
        backoff: Optional[RateLimitBackoff] = None,
        sleep: Sleeper = interruptible_sleep,
    ) -> None:
        self._repo = repository
        self._client = client
        self._config = config
        self._backoff = backoff or RateLimitBackoff()
        self._sleep = sleep

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> SyncResult:
        """
        Ejecuta el sync hasta el fin del catálogo o hasta que se active stop_event.
        """
        if not self._config.enabled:
            logger.info("Scraper deshabilitado (SCRAPER_ENABLED=false). No se sincroniza.")
            return SyncResult(shows_committed=0, last_show_id=0, pages_fetched=0, enabled=False)

        stop_event = stop_event or asyncio.Event()

        last_show_id = 0
        committed = 0
        pages_fetched = 0
        end_of_catalog = False

        try:
            last_show_id = await self._repo.highest_show_id() or 0
            page = last_show_id // self._config.index_page_size
            logger.info(f"Sync TVMaze: reanudando desde pagina {page} (ultimo show persistido={last_show_id})")

            while not stop_event.is_set():
                shows = await self._backoff.run(
                    lambda p=page: self._client.list_shows_on_page(p),
                    description=f"shows?page={page}",
                    stop_event=stop_event,
                )
                if shows is None:
                    end_of_catalog = True
                    break
                pages_fetched += 1

                pending = sorted((s for s in shows if s.id > last_show_id), key=lambda s: s.id)
                logger.info(f"Pagina {page}: {len(shows)} shows, {len(pending)} pendientes")

                for show in pending:
                    if stop_event.is_set():
                        break
                    if show.id <= last_show_id:
                        # ID repetido dentro de la misma pagina
                        continue

                    roster = await self._backoff.run(
                        lambda sid=show.id: self._client.list_cast_for_show(sid),
                        description=f"shows/{show.id}/cast",
                        stop_event=stop_event,
                    )
                    members = await resolve_cast(self._repo, roster, show)
                    await self._repo.commit_show(show, members)

                    committed += 1
                    last_show_id = show.id
                    logger.debug(f"Show {show.id} ({show.name}) sincronizado con {len(members)} personas")

                    if not await self._pace(stop_event):
                        break

                page += 1

        except SyncStoppedError as e:
            logger.info(f"Sync detenido con un request pendiente: {e}")
        except CatalogPersistenceError:
            logger.exception("Error escribiendo en la base de datos. Sync detenido.")
            raise
        except Exception:
            # Causa desconocida: detener para no avanzar sobre estado incierto.
            logger.opt(exception=True).critical("Sync detenido por un error fatal.")
            raise

        stopped = stop_event.is_set() and not end_of_catalog
        if end_of_catalog:
            logger.info("Sync TVMaze completado: se alcanzo la ultima pagina del indice.")
        elif stopped:
            logger.info("Sync TVMaze detenido a pedido.")

        logger.info(f"Sync TVMaze: shows={committed}, paginas={pages_fetched}, ultimo show={last_show_id}")
        return SyncResult(
            shows_committed=committed,
            last_show_id=last_show_id,
            pages_fetched=pages_fetched,
            end_of_catalog=end_of_catalog,
            stopped=stopped,
        )

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _pace(self, stop_event: asyncio.Event) -> bool:
        """Pausa fija entre shows. Retorna False si se pidió detener."""
        delay_s = self._config.request_delay_s
        if delay_s <= 0:
            return not stop_event.is_set()
        return await self._sleep(delay_s, stop_event)


def build_from_settings(
    settings: Settings = app_settings,
    *,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> TvMazeCatalogSync:
    """
    Constructor "oficial" del pipeline a partir de Settings.
    """
    if session_factory is None:
        from app.infrastructure.database.session import AsyncSessionLocal

        session_factory = AsyncSessionLocal

    config = ScraperConfig.from_settings(settings)
    client = TvMazeClient(
        base_url=settings.SCRAPER_BASE_URL,
        timeout_s=settings.SCRAPER_HTTP_TIMEOUT_S,
    )
    return TvMazeCatalogSync(
        repository=SqlAlchemyCatalogRepository(session_factory),
        client=client,
        config=config,
        backoff=RateLimitBackoff(base_delay_s=settings.SCRAPER_BACKOFF_BASE_S),
    )
