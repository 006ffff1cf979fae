"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends

from app.core.config import settings
from app.application.use_cases.catalog_use_cases import CatalogUseCases
from app.application.use_cases.catalog_sync_use_cases import CatalogSyncUseCases
from app.domain.repositories.catalog_repository import ICatalogRepository
from app.api.v1.dependencies.repository_deps import get_catalog_repository


def get_catalog_use_cases(
    repository: ICatalogRepository = Depends(get_catalog_repository)
) -> CatalogUseCases:
    """
    Dependencia para obtener los casos de uso de consulta del catalogo.

    Args:
        repository: Repositorio del catalogo

    Returns:
        CatalogUseCases: Instancia con el tamano de pagina configurado
    """
    return CatalogUseCases(repository, page_size=settings.API_PAGE_SIZE)


def get_catalog_sync_use_cases() -> CatalogSyncUseCases:
    """Dependencia para consultar el estado del sync en background."""
    return CatalogSyncUseCases()
