"""
Casos de uso de consulta del catalogo (solo lectura).
"""
from typing import List

from app.application.dto.show_dto import CastMemberDTO, ShowDTO
from app.domain.repositories.catalog_repository import ICatalogRepository
from app.shared.exceptions.domain import ValidationException


class CatalogUseCases:
    """
    Casos de uso para paginar el catalogo persistido.
    """

    def __init__(self, repository: ICatalogRepository, page_size: int):
        self.repository = repository
        self.page_size = page_size

    async def get_shows_page(self, page: int = 0) -> List[ShowDTO]:
        """
        Obtiene una pagina de shows ordenados por ID.

        Args:
            page: Numero de pagina (desde 0)

        Returns:
            List[ShowDTO]: Shows con su reparto

        Raises:
            ValidationException: Si la pagina es negativa
        """
        if page < 0:
            raise ValidationException("La pagina debe ser >= 0", field="page")

        rows = await self.repository.list_shows(
            skip=page * self.page_size,
            limit=self.page_size,
        )
        return [
            ShowDTO(
                id=show.id,
                name=show.name,
                cast=[
                    CastMemberDTO(id=p.id, name=p.name, birthday=p.birthday)
                    for p in cast
                ],
            )
            for show, cast in rows
        ]
