"""
Dependencias para inyección de repositorios.
"""
from app.domain.repositories.catalog_repository import ICatalogRepository
from app.infrastructure.database.session import AsyncSessionLocal
from app.infrastructure.repositories.catalog_repository_impl import SqlAlchemyCatalogRepository


def get_catalog_repository() -> ICatalogRepository:
    """
    Dependencia para obtener el repositorio del catalogo.

    El repositorio abre una sesión por operación, por eso recibe la
    session factory y no una sesión de request.

    Returns:
        ICatalogRepository: Repositorio del catalogo
    """
    return SqlAlchemyCatalogRepository(AsyncSessionLocal)
