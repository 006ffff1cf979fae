"""
Tipos y utilidades puras para el pipeline TVMaze -> base de datos.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from app.domain.entities.catalog import CastEntry, Show


class TvMazePayloadError(ValueError):
    """El payload de TVMaze no tiene la forma esperada."""


def parse_birthday(raw: Any) -> Optional[date]:
    """
    Parsea la fecha de nacimiento de TVMaze ("YYYY-MM-DD" o null).
    """
    if raw in (None, ""):
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError as e:
        raise TvMazePayloadError(f"Fecha de nacimiento invalida: {raw!r}") from e


def _require_int(obj: dict[str, Any], key: str, context: str) -> int:
    value = obj.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TvMazePayloadError(f"{context}: '{key}' ausente o no entero ({value!r})")
    return value


def parse_show(raw: Any) -> Show:
    """Convierte un item de /shows?page=N en Show."""
    if not isinstance(raw, dict):
        raise TvMazePayloadError(f"Show con formato inesperado: {raw!r}")
    return Show(id=_require_int(raw, "id", "show"), name=raw.get("name"))


def parse_cast_entry(raw: Any) -> CastEntry:
    """Convierte un item de /shows/{id}/cast ({person: {...}}) en CastEntry."""
    person = raw.get("person") if isinstance(raw, dict) else None
    if not isinstance(person, dict):
        raise TvMazePayloadError(f"Entrada de reparto sin 'person': {raw!r}")
    return CastEntry(
        person_id=_require_int(person, "id", "person"),
        name=person.get("name"),
        birthday=parse_birthday(person.get("birthday")),
    )


def parse_list(payload: Any, what: str) -> list[Any]:
    """Valida que el cuerpo de la respuesta sea una lista JSON."""
    if not isinstance(payload, list):
        raise TvMazePayloadError(f"Se esperaba una lista de {what}, se recibio {type(payload).__name__}")
    return payload
