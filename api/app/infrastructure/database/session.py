"""
Gestión de sesiones de base de datos.
"""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base

from app.core.config import settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(database_url: str) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }

    # Configuracion de pool solo para PostgreSQL
    if "postgresql" in database_url:
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


def create_engine(database_url: str, **overrides) -> AsyncEngine:
    """
    Crea un engine async. En SQLite activa las foreign keys por conexion
    para que la tabla show_cast respete sus referencias.
    """
    args = _create_engine_args(database_url)
    args.update(overrides)
    new_engine = create_async_engine(database_url, **args)

    if database_url.startswith("sqlite"):
        @event.listens_for(new_engine.sync_engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory con la misma politica para la app y para los tests."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


# Engine de base de datos
engine = create_engine(settings.DATABASE_URL)

# Session factory
AsyncSessionLocal = create_session_factory(engine)


async def init_db(bind: AsyncEngine = None) -> None:
    """Inicializa la base de datos creando todas las tablas."""
    # Registrar modelos con Base antes de create_all
    import app.infrastructure.database  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Cierra las conexiones de la base de datos."""
    await engine.dispose()
