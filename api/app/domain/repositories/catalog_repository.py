"""
Interfaz del repositorio del catalogo.
Define el contrato que debe cumplir cualquier implementación.
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set, Tuple

from app.domain.entities.catalog import Person, ResolvedCastMember, Show


class CatalogPersistenceError(RuntimeError):
    """
    Error escribiendo o leyendo el catalogo persistido.

    No es transitorio: indica estado local corrupto o esquema desalineado,
    por lo que el sync no lo reintenta.
    """


class ICatalogRepository(ABC):
    """
    Interfaz del repositorio del catalogo.
    Define las operaciones de persistencia que usa el sync y el endpoint de consulta.
    """

    @abstractmethod
    async def highest_show_id(self) -> Optional[int]:
        """
        Obtiene el mayor ID de show persistido.

        Returns:
            Optional[int]: ID máximo o None si no hay shows
        """
        pass

    @abstractmethod
    async def find_people_by_ids(self, ids: Set[int]) -> List[Person]:
        """
        Busca personas ya persistidas por ID.

        Args:
            ids: IDs de persona a buscar

        Returns:
            List[Person]: Personas encontradas, con sus show_ids actuales
        """
        pass

    @abstractmethod
    async def commit_show(self, show: Show, members: Iterable[ResolvedCastMember]) -> None:
        """
        Persiste un show y sus asociaciones de reparto como una unidad atómica.

        Args:
            show: Show a persistir
            members: Personas resueltas (nuevas o existentes) del reparto

        Raises:
            CatalogPersistenceError: Si la transacción falla; no queda nada persistido
        """
        pass

    @abstractmethod
    async def list_shows(self, skip: int = 0, limit: int = 10) -> List[Tuple[Show, List[Person]]]:
        """
        Obtiene shows ordenados por ID con su reparto.

        Args:
            skip: Número de shows a saltar
            limit: Número máximo de shows a retornar

        Returns:
            List[Tuple[Show, List[Person]]]: Shows con el reparto ordenado por
            fecha de nacimiento descendente
        """
        pass
