"""
Casos de uso para la tarea de sync TVMaze en background.

Patron:
- En el startup del API se lanza una unica tarea asyncio con el sync.
- En el shutdown se activa el stop_event, se cancela la tarea y se espera.
- El estado (ultimo resultado o error fatal) se guarda en memoria para el
  endpoint de status. Un error fatal detiene el sync, no el proceso.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from app.application.dto.sync_dto import SyncResultDTO, SyncStatusDTO
from app.infrastructure.external.tvmaze_sync.sync_service import (
    SyncResult,
    TvMazeCatalogSync,
    build_from_settings,
)


class CatalogSyncUseCases:
    """
    Orquestador de la tarea de sync (una sola instancia activa por proceso).
    """

    _task: Optional[asyncio.Task] = None
    _stop_event: Optional[asyncio.Event] = None
    _enabled: bool = False
    _started_at: Optional[datetime] = None
    _finished_at: Optional[datetime] = None
    _last_result: Optional[SyncResult] = None
    _last_error: Optional[str] = None

    def __init__(self, sync_factory: Callable[[], TvMazeCatalogSync] = build_from_settings):
        self._sync_factory = sync_factory

    @classmethod
    def reset(cls) -> None:
        """Limpia el estado en memoria (usado por tests)."""
        cls._task = None
        cls._stop_event = None
        cls._enabled = False
        cls._started_at = None
        cls._finished_at = None
        cls._last_result = None
        cls._last_error = None

    async def start(self) -> bool:
        """
        Lanza el sync en background si no hay uno corriendo.

        Returns:
            bool: True si se lanzo una nueva tarea
        """
        cls = type(self)
        if cls._task is not None and not cls._task.done():
            logger.warning("Sync TVMaze ya esta corriendo. No se lanza otra tarea.")
            return False

        sync = self._sync_factory()
        cls._enabled = sync.enabled
        cls._stop_event = asyncio.Event()
        cls._started_at = datetime.now(timezone.utc)
        cls._finished_at = None
        cls._last_error = None
        cls._task = asyncio.create_task(self._run(sync, cls._stop_event), name="tvmaze-sync")
        return True

    async def stop(self, timeout_s: float = 5.0) -> None:
        """Pide detener el sync y espera a que la tarea termine."""
        cls = type(self)
        task = cls._task
        if task is None or task.done():
            return

        cls._stop_event.set()
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout_s)
        except asyncio.TimeoutError:
            # La tarea no respondio a la parada cooperativa: se cancela.
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        logger.info("Tarea de sync TVMaze detenida")

    def get_status(self) -> SyncStatusDTO:
        """Estado actual para el endpoint de status."""
        cls = type(self)
        result = cls._last_result
        return SyncStatusDTO(
            enabled=cls._enabled,
            running=cls._task is not None and not cls._task.done(),
            started_at=cls._started_at,
            finished_at=cls._finished_at,
            last_result=SyncResultDTO.model_validate(result) if result else None,
            last_error=cls._last_error,
        )

    async def _run(self, sync: TvMazeCatalogSync, stop_event: asyncio.Event) -> None:
        cls = type(self)
        try:
            cls._last_result = await sync.run(stop_event)
        except asyncio.CancelledError:
            logger.info("Sync TVMaze cancelado")
            raise
        except Exception as e:
            cls._last_error = f"{type(e).__name__}: {e}"
        finally:
            cls._finished_at = datetime.now(timezone.utc)
            await sync.aclose()
