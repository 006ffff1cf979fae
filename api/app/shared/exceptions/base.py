"""
Excepción base de los errores que el API traduce a respuestas HTTP.

Los errores del sync (TvMazeApiError, CatalogPersistenceError...) no heredan
de aquí: nunca llegan a un request, quedan registrados en el estado del sync.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Error con código HTTP y código de error propio.

    El handler global de main.py lo serializa con to_dict().
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = dict(details) if details else {}

    def to_dict(self) -> Dict[str, Any]:
        """Cuerpo JSON: {error, message, details}."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
