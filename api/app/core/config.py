"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.

Incluye la configuracion del scraper de TVMaze (habilitado, pausa entre
requests, tamano de pagina del indice remoto) y del endpoint de consulta.
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    - DATABASE_URL acepta SQLite (aiosqlite) o PostgreSQL (asyncpg)
    - SCRAPER_*: comportamiento del sync incremental contra TVMaze
    - API_PAGE_SIZE: tamano de pagina del endpoint de consulta (no del indice remoto)
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="TVMaze Catalog Sync")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./tvmaze.db")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # Scraper TVMaze
    SCRAPER_ENABLED: bool = Field(default=True)
    SCRAPER_REQUEST_DELAY_MS: int = Field(default=100)
    SCRAPER_BASE_URL: str = Field(default="https://api.tvmaze.com/")
    # Tamano fijo de pagina del indice /shows de TVMaze
    SCRAPER_INDEX_PAGE_SIZE: int = Field(default=250)
    SCRAPER_HTTP_TIMEOUT_S: float = Field(default=30.0)
    # Multiplicador de 2^intento; 1.0 da esperas de 2, 4, 8... segundos
    SCRAPER_BACKOFF_BASE_S: float = Field(default=1.0)

    # Endpoint de consulta
    API_PAGE_SIZE: int = Field(default=10)

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """Indica si la base de datos configurada es SQLite."""
        return self.DATABASE_URL.startswith("sqlite")

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


# Instancia global de configuracion
settings = Settings()
