"""
Middleware de último recurso para errores no manejados en requests.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger


INTERNAL_ERROR_BODY = {
    "error": "INTERNAL_SERVER_ERROR",
    "message": "Ha ocurrido un error interno del servidor",
    "details": {},
}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Convierte cualquier excepción que escape de un endpoint en un 500
    genérico, sin exponer el detalle al cliente.

    Las AppException no llegan aquí: las resuelve el handler de main.py.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            # loguru interpreta llaves del mensaje como formato
            detail = str(exc).replace("{", "{{").replace("}", "}}")
            logger.opt(exception=exc).error(
                f"{request.method} {request.url.path} fallo: {type(exc).__name__}: {detail}"
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=INTERNAL_ERROR_BODY,
            )
