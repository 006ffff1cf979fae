"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .show_dto import CastMemberDTO, ShowDTO
from .sync_dto import SyncResultDTO, SyncStatusDTO

__all__ = [
    "CastMemberDTO",
    "ShowDTO",
    "SyncResultDTO",
    "SyncStatusDTO",
]
