"""
Entidades del dominio.
"""
from app.domain.entities.catalog import (
    Show,
    Person,
    CastEntry,
    ResolvedCastMember,
)

__all__ = [
    "Show",
    "Person",
    "CastEntry",
    "ResolvedCastMember",
]
