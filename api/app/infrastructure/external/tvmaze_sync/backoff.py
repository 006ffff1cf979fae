"""
Backoff reactivo ante rate limiting.

Máquina de estados por llamada (no compartida entre llamadas):

    Attempting -> Success
    Attempting -> RateLimited -> Waiting -> Attempting (sin tope de intentos)
    Attempting -> OtherFailure (se propaga sin reintento)

La espera del intento n es base_delay_s * 2^n (n empieza en 1).
La única salida de RateLimited es el éxito o una parada cooperativa.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

from .tvmaze_client import RateLimitedError

T = TypeVar("T")

Sleeper = Callable[[float, Optional[asyncio.Event]], Awaitable[bool]]


class SyncStoppedError(RuntimeError):
    """Se pidió detener el sync mientras se esperaba."""


async def interruptible_sleep(seconds: float, stop_event: Optional[asyncio.Event] = None) -> bool:
    """
    Duerme `seconds` o hasta que se active stop_event.

    Returns:
        True si se completó la espera, False si se pidió detener
    """
    if stop_event is None:
        await asyncio.sleep(seconds)
        return True
    if stop_event.is_set():
        return False
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return True
    return False


class RateLimitBackoff:
    """Reintenta una llamada mientras TVMaze responda 429."""

    def __init__(self, *, base_delay_s: float = 1.0, sleep: Sleeper = interruptible_sleep) -> None:
        self._base_delay_s = base_delay_s
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Espera (segundos) antes del reintento número `attempt` (desde 1)."""
        return self._base_delay_s * (2 ** attempt)

    async def run(
        self,
        call: Callable[[], Awaitable[T]],
        *,
        description: str,
        stop_event: Optional[asyncio.Event] = None,
    ) -> T:
        attempt = 0
        while True:
            try:
                return await self._call_until_stopped(call, description, stop_event)
            except RateLimitedError as e:
                attempt += 1
                delay = self.delay_for(attempt)
                # Retry-After solo se informa; el calendario es siempre 2^n
                hint = f" (Retry-After={e.retry_after})" if e.retry_after else ""
                logger.info(
                    f"{description}: rate limit (intento {attempt}), esperando {delay:.1f}s...{hint}"
                )
                if not await self._sleep(delay, stop_event):
                    raise SyncStoppedError(f"{description}: detenido durante backoff")

    @staticmethod
    async def _call_until_stopped(
        call: Callable[[], Awaitable[T]],
        description: str,
        stop_event: Optional[asyncio.Event],
    ) -> T:
        """
        Ejecuta la llamada compitiendo contra stop_event: si se pide detener
        con el request en vuelo, se cancela y no se usa su resultado.
        """
        if stop_event is None:
            return await call()
        if stop_event.is_set():
            raise SyncStoppedError(f"{description}: detenido antes del request")

        call_task = asyncio.ensure_future(call())
        stop_task = asyncio.ensure_future(stop_event.wait())
        try:
            await asyncio.wait({call_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop_task.cancel()
            if not call_task.done():
                call_task.cancel()
                await asyncio.gather(call_task, return_exceptions=True)

        if call_task.cancelled():
            raise SyncStoppedError(f"{description}: request cancelado por parada")
        return call_task.result()
