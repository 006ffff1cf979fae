"""
Cliente mínimo de la REST API de TVMaze (httpx async).

Expone las dos lecturas que necesita el sync:
- GET shows?page={n}       -> lista de shows, o None si la página no existe
- GET shows/{id}/cast      -> reparto crudo (puede traer personas repetidas)

No reintenta nada: un 429 se levanta como RateLimitedError y el
reintento lo decide RateLimitBackoff. Ver https://www.tvmaze.com/api#rate-limiting
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from app.domain.entities.catalog import CastEntry, Show

from .types import TvMazePayloadError, parse_cast_entry, parse_list, parse_show


_NOT_FOUND = object()


class TvMazeApiError(RuntimeError):
    """Error de integración con TVMaze."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(TvMazeApiError):
    """TVMaze respondió 429 (too many requests)."""

    def __init__(self, url: str, retry_after: Optional[str] = None) -> None:
        super().__init__(f"Rate limit alcanzado en {url}", status_code=429)
        self.url = url
        self.retry_after = retry_after


class TvMazeClient:
    """
    Cliente HTTP de TVMaze.

    Importante:
    - 404 es un resultado normal (fin del índice / show sin reparto), no un error.
    - 429 -> RateLimitedError; cualquier otro status no-2xx -> TvMazeApiError.
    """

    def __init__(
        self,
        *,
        base_url: str = "https://api.tvmaze.com/",
        timeout_s: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_s,
            headers={"Accept": "application/json"},
        )

    async def list_shows_on_page(self, page: int) -> Optional[list[Show]]:
        """
        Obtiene los shows de una página del índice.

        Returns:
            Lista de shows, o None si la página está fuera de rango (fin del catálogo)
        """
        payload = await self._get_json("shows", params={"page": page})
        if payload is _NOT_FOUND:
            logger.info(f"Pagina {page} del indice no existe: fin del catalogo")
            return None

        try:
            return [parse_show(item) for item in parse_list(payload, "shows")]
        except TvMazePayloadError as e:
            raise TvMazeApiError(f"Payload invalido en shows?page={page}: {e}") from e

    async def list_cast_for_show(self, show_id: int) -> list[CastEntry]:
        """
        Obtiene el reparto crudo de un show.

        Un 404 o un cuerpo null se tratan como reparto vacío.
        """
        payload = await self._get_json(f"shows/{show_id}/cast")
        if payload is _NOT_FOUND or payload is None:
            logger.warning(f"Show {show_id} sin reparto disponible; se guarda sin cast")
            return []

        try:
            return [parse_cast_entry(item) for item in parse_list(payload, "cast")]
        except TvMazePayloadError as e:
            raise TvMazeApiError(f"Payload invalido en shows/{show_id}/cast: {e}") from e

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "TvMazeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _get_json(self, path: str, *, params: Optional[dict[str, Any]] = None) -> Any:
        """
        GET que clasifica la respuesta:
        - 2xx: JSON decodificado
        - 404: _NOT_FOUND
        - 429: RateLimitedError
        - resto (o error de red / JSON inválido): TvMazeApiError
        """
        try:
            resp = await self._http.get(path, params=params)
        except httpx.HTTPError as e:
            raise TvMazeApiError(f"Fallo de red en GET {path}: {e}") from e

        if resp.status_code == 404:
            return _NOT_FOUND

        if resp.status_code == 429:
            raise RateLimitedError(str(resp.request.url), resp.headers.get("Retry-After"))

        if not 200 <= resp.status_code < 300:
            raise TvMazeApiError(
                f"TVMaze GET {path} falló {resp.status_code}: {resp.text[:500]}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise TvMazeApiError(f"Respuesta no JSON en GET {path}") from e
