"""
Casos de uso de la aplicacion.
"""
from .catalog_use_cases import CatalogUseCases
from .catalog_sync_use_cases import CatalogSyncUseCases

__all__ = ["CatalogUseCases", "CatalogSyncUseCases"]
