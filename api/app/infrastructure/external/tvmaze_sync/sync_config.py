"""
Configuración del sync TVMaze.

Este módulo no realiza I/O: solo define configuración.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.core.config import Settings


class SyncConfigError(RuntimeError):
    """Error de configuración del pipeline."""


@dataclass(frozen=True)
class ScraperConfig:
    """
    Entrada externa del sync.

    index_page_size es el tamaño fijo de página del índice remoto de TVMaze,
    no el API_PAGE_SIZE del endpoint de consulta.
    """

    enabled: bool = True
    request_delay_ms: int = 100
    index_page_size: int = 250

    def __post_init__(self):
        if self.request_delay_ms < 0:
            raise SyncConfigError(f"request_delay_ms debe ser >= 0 (recibido {self.request_delay_ms})")
        if self.index_page_size <= 0:
            raise SyncConfigError(f"index_page_size debe ser > 0 (recibido {self.index_page_size})")

    @property
    def request_delay_s(self) -> float:
        return self.request_delay_ms / 1000.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScraperConfig":
        return cls(
            enabled=settings.SCRAPER_ENABLED,
            request_delay_ms=settings.SCRAPER_REQUEST_DELAY_MS,
            index_page_size=settings.SCRAPER_INDEX_PAGE_SIZE,
        )
