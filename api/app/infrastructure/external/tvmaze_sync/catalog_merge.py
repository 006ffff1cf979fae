"""
Deduplicación y merge del reparto de un show contra las personas persistidas.

- El reparto crudo se colapsa por person_id (gana la primera aparición).
- Las personas ya persistidas se reutilizan tal cual y solo se les agrega el show.
- Las nuevas se construyen desde el reparto crudo.

El resultado no repite personas y no introduce pares (show, persona)
duplicados aunque se invoque varias veces con repartos solapados.
"""

from __future__ import annotations

from typing import Iterable

from app.domain.entities.catalog import CastEntry, Person, ResolvedCastMember, Show
from app.domain.repositories.catalog_repository import ICatalogRepository


def dedupe_roster(roster: Iterable[CastEntry]) -> list[CastEntry]:
    """Colapsa entradas repetidas por person_id respetando el orden de origen."""
    seen: dict[int, CastEntry] = {}
    for entry in roster:
        seen.setdefault(entry.person_id, entry)
    return list(seen.values())


def merge_cast(
    roster: Iterable[CastEntry],
    show: Show,
    existing_people: Iterable[Person],
) -> list[ResolvedCastMember]:
    """
    Resuelve el reparto de `show` contra personas ya persistidas.

    Returns:
        Una entrada por persona: (persona asociada al show, es_nueva)
    """
    existing_by_id = {p.id: p for p in existing_people}
    resolved: list[ResolvedCastMember] = []

    for entry in dedupe_roster(roster):
        existing = existing_by_id.get(entry.person_id)
        if existing is not None:
            resolved.append(ResolvedCastMember(person=existing.with_show(show.id), is_new=False))
            continue

        person = Person(
            id=entry.person_id,
            name=entry.name,
            birthday=entry.birthday,
            show_ids=frozenset({show.id}),
        )
        resolved.append(ResolvedCastMember(person=person, is_new=True))

    return resolved


async def resolve_cast(
    repository: ICatalogRepository,
    roster: Iterable[CastEntry],
    show: Show,
) -> list[ResolvedCastMember]:
    """Busca en lote las personas del reparto y aplica merge_cast."""
    roster = list(roster)
    ids = {entry.person_id for entry in roster}
    existing = await repository.find_people_by_ids(ids) if ids else []
    return merge_cast(roster, show, existing)
