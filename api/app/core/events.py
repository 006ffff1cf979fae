"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI
from loguru import logger

from app.core.config import settings
from app.infrastructure.database.session import init_db, close_db
from app.application.use_cases.catalog_sync_use_cases import CatalogSyncUseCases


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa base de datos, logging y la tarea de sync."""
        try:
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            _validate_config()

            # Configurar logging adicional
            logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )

            # Inicializar base de datos (crea tablas si no existen)
            await init_db()
            logger.info("Base de datos inicializada")

            # Lanzar sync TVMaze en background (un solo worker por proceso)
            if settings.SCRAPER_ENABLED:
                await CatalogSyncUseCases().start()
                logger.info("Sync TVMaze lanzado en background")
            else:
                logger.info("Sync TVMaze deshabilitado (SCRAPER_ENABLED=false)")

            logger.success("Aplicacion iniciada correctamente")

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def _validate_config() -> None:
    """Valida que la configuracion critica sea coherente."""
    warnings = []

    if settings.SCRAPER_REQUEST_DELAY_MS < 0:
        warnings.append("SCRAPER_REQUEST_DELAY_MS negativo - el sync fallara al iniciar")
    if settings.API_PAGE_SIZE <= 0:
        warnings.append("API_PAGE_SIZE debe ser > 0 - /shows no retornara resultados")

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Detiene el sync y libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        await CatalogSyncUseCases().stop()

        # Cerrar conexiones de base de datos
        await close_db()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

    return shutdown


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Ciclo de vida de la aplicacion para FastAPI(lifespan=...).

    Ejecuta el startup antes de aceptar requests y el shutdown al cerrar,
    incluso si el servidor termina por un error.
    """
    await startup_handler(app)()
    try:
        yield
    finally:
        await shutdown_handler(app)()
