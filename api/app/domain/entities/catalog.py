"""
Entidades de dominio del catalogo: Show, Person y miembros de reparto.

Son registros planos. La pertenencia de una persona a un show se expresa
con IDs (Person.show_ids), nunca con referencias cruzadas entre objetos.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class Show:
    """Show del catalogo. El ID lo asigna TVMaze."""

    id: int
    name: Optional[str] = None

    def __post_init__(self):
        if self.id <= 0:
            raise ValueError(f"ID de show invalido: {self.id}")


@dataclass(frozen=True)
class Person:
    """
    Persona del reparto.

    show_ids contiene los shows a los que ya esta asociada en la base
    de datos; solo crece (nunca se desasocia un show).
    """

    id: int
    name: Optional[str] = None
    birthday: Optional[date] = None
    show_ids: FrozenSet[int] = field(default_factory=frozenset)

    def with_show(self, show_id: int) -> "Person":
        """Retorna una copia asociada ademas a show_id."""
        if show_id in self.show_ids:
            return self
        return Person(
            id=self.id,
            name=self.name,
            birthday=self.birthday,
            show_ids=self.show_ids | {show_id},
        )


@dataclass(frozen=True)
class CastEntry:
    """Entrada cruda de /shows/{id}/cast (puede venir repetida)."""

    person_id: int
    name: Optional[str] = None
    birthday: Optional[date] = None


@dataclass(frozen=True)
class ResolvedCastMember:
    """Persona resuelta para un show, indicando si hay que insertarla."""

    person: Person
    is_new: bool
