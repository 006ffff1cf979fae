"""
DTOs del estado del sync TVMaze.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class SyncResultDTO(BaseModel):
    """Resultado de una corrida del sync."""

    shows_committed: int
    last_show_id: int
    pages_fetched: int
    end_of_catalog: bool = False
    stopped: bool = False

    class Config:
        from_attributes = True


class SyncStatusDTO(BaseModel):
    """Estado actual de la tarea de sync en background."""

    enabled: bool = Field(..., description="SCRAPER_ENABLED")
    running: bool = Field(..., description="Hay una corrida en curso")
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    last_result: Optional[SyncResultDTO] = None
    last_error: Optional[str] = None
