"""
Implementación del repositorio del catalogo usando SQLAlchemy.

Cada commit_show abre su propia sesión y transacción: un show se persiste
completo (show + personas nuevas + asociaciones) o no se persiste nada.
"""
from typing import Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger
from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.entities.catalog import Person, ResolvedCastMember, Show
from app.domain.repositories.catalog_repository import (
    CatalogPersistenceError,
    ICatalogRepository,
)
from app.infrastructure.database.models import PersonModel, ShowModel, show_cast


class SqlAlchemyCatalogRepository(ICatalogRepository):
    """Implementación del repositorio del catalogo con SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Inicializa el repositorio con una session factory.

        Args:
            session_factory: Factory de sesiones async (una sesión por operación)
        """
        self._session_factory = session_factory

    async def highest_show_id(self) -> Optional[int]:
        """Obtiene el mayor ID de show persistido."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(func.max(ShowModel.id)))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CatalogPersistenceError(f"No se pudo leer el ultimo show: {e}") from e

    async def find_people_by_ids(self, ids: Set[int]) -> List[Person]:
        """Busca personas persistidas por ID, incluyendo sus shows actuales."""
        if not ids:
            return []

        try:
            async with self._session_factory() as session:
                people_result = await session.execute(
                    select(PersonModel).where(PersonModel.id.in_(ids))
                )
                db_people = people_result.scalars().all()
                if not db_people:
                    return []

                links_result = await session.execute(
                    select(show_cast.c.person_id, show_cast.c.show_id).where(
                        show_cast.c.person_id.in_([p.id for p in db_people])
                    )
                )
                show_ids_by_person: Dict[int, Set[int]] = {}
                for person_id, show_id in links_result.all():
                    show_ids_by_person.setdefault(person_id, set()).add(show_id)
        except SQLAlchemyError as e:
            raise CatalogPersistenceError(f"No se pudieron leer personas: {e}") from e

        return [
            self._to_entity(db_person, show_ids_by_person.get(db_person.id, set()))
            for db_person in db_people
        ]

    async def commit_show(self, show: Show, members: Iterable[ResolvedCastMember]) -> None:
        """Persiste show, personas nuevas y pares (show, persona) faltantes."""
        members = list(members)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await self._save_show(session, show)

                    new_people = [m.person for m in members if m.is_new]
                    for person in new_people:
                        session.add(
                            PersonModel(id=person.id, name=person.name, birthday=person.birthday)
                        )
                    await session.flush()

                    existing_result = await session.execute(
                        select(show_cast.c.person_id).where(show_cast.c.show_id == show.id)
                    )
                    already_linked = set(existing_result.scalars().all())

                    pairs = [
                        {"show_id": show.id, "person_id": m.person.id}
                        for m in members
                        if m.person.id not in already_linked
                    ]
                    if pairs:
                        await session.execute(insert(show_cast), pairs)
        except SQLAlchemyError as e:
            raise CatalogPersistenceError(
                f"Error guardando el show {show.id}: {e}"
            ) from e

        logger.debug(
            f"Show {show.id} guardado: {len(members)} miembros de reparto "
            f"({len(new_people)} nuevos, {len(pairs)} asociaciones nuevas)"
        )

    async def list_shows(self, skip: int = 0, limit: int = 10) -> List[Tuple[Show, List[Person]]]:
        """Obtiene shows ordenados por ID con el reparto por fecha de nacimiento desc."""
        async with self._session_factory() as session:
            shows_result = await session.execute(
                select(ShowModel).order_by(ShowModel.id).offset(skip).limit(limit)
            )
            db_shows = shows_result.scalars().all()
            if not db_shows:
                return []

            cast_result = await session.execute(
                select(show_cast.c.show_id, PersonModel)
                .join(PersonModel, PersonModel.id == show_cast.c.person_id)
                .where(show_cast.c.show_id.in_([s.id for s in db_shows]))
                .order_by(PersonModel.birthday.desc().nulls_last(), PersonModel.id)
            )
            cast_by_show: Dict[int, List[Person]] = {}
            for show_id, db_person in cast_result.all():
                cast_by_show.setdefault(show_id, []).append(self._to_entity(db_person))

        return [
            (Show(id=db_show.id, name=db_show.name), cast_by_show.get(db_show.id, []))
            for db_show in db_shows
        ]

    @staticmethod
    async def _save_show(session: AsyncSession, show: Show) -> None:
        """Inserta el show si no existe (re-proceso del show en vuelo)."""
        existing = await session.get(ShowModel, show.id)
        if existing is None:
            session.add(ShowModel(id=show.id, name=show.name))

    @staticmethod
    def _to_entity(db_person: PersonModel, show_ids: Iterable[int] = ()) -> Person:
        """
        Convierte un modelo de base de datos a entidad de dominio.

        Args:
            db_person: Modelo de SQLAlchemy
            show_ids: Shows asociados a la persona

        Returns:
            Person: Entidad de dominio
        """
        return Person(
            id=db_person.id,
            name=db_person.name,
            birthday=db_person.birthday,
            show_ids=frozenset(show_ids),
        )
