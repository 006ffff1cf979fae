"""
Configuración de fixtures para pytest.
"""
import os

# Antes de importar la app: sin sync en background y con SQLite en memoria.
os.environ.setdefault("SCRAPER_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.infrastructure.database.session import (
    Base,
    create_engine,
    create_session_factory,
    init_db,
)
from app.infrastructure.repositories.catalog_repository_impl import SqlAlchemyCatalogRepository


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory sobre una base SQLite en memoria por test.
    StaticPool mantiene una sola conexión para que todas las sesiones
    vean la misma base.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)

    yield create_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def catalog_repository(session_factory) -> SqlAlchemyCatalogRepository:
    """Repositorio del catalogo sobre la base en memoria."""
    return SqlAlchemyCatalogRepository(session_factory)
