"""
CLI: TVMaze -> base de datos (one-way sync, una corrida).

Uso recomendado:
  - El API ya lanza el sync en background al iniciar (SCRAPER_ENABLED=true).
  - Este script sirve para ejecutarlo como job (cron/systemd timer) con
    SCRAPER_ENABLED=false en el API, manteniendo un solo ingester activo.

Ejecución:
  python scripts/run_sync.py
  python scripts/run_sync.py --request-delay-ms 500
  python scripts/run_sync.py --skip-init-db

Ctrl+C detiene el sync de forma cooperativa; el show en vuelo no queda
a medio persistir.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raíz `app/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

# Cargar variables desde .env si existe (api/.env o raiz del repo).
load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_API_ROOT.parent / ".env", override=False)

from app.core.config import settings
from app.infrastructure.database.session import close_db, init_db
from app.infrastructure.external.tvmaze_sync.sync_service import build_from_settings


async def _run(args: argparse.Namespace) -> int:
    overrides = {"SCRAPER_ENABLED": True}
    if args.request_delay_ms is not None:
        overrides["SCRAPER_REQUEST_DELAY_MS"] = args.request_delay_ms
    run_settings = settings.model_copy(update=overrides)

    if not args.skip_init_db:
        await init_db()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows: Ctrl+C levanta KeyboardInterrupt
            pass

    service = build_from_settings(run_settings)
    try:
        logger.info("Iniciando TVMaze -> base de datos sync...")
        result = await service.run(stop_event)
    finally:
        await service.aclose()
        await close_db()

    logger.info(
        f"Sync OK: shows={result.shows_committed}, paginas={result.pages_fetched}, "
        f"ultimo show={result.last_show_id}, fin_catalogo={result.end_of_catalog}"
    )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--request-delay-ms",
        type=int,
        default=None,
        help="Pausa fija entre shows (override de SCRAPER_REQUEST_DELAY_MS).",
    )
    parser.add_argument(
        "--skip-init-db",
        action="store_true",
        help="No crear tablas (esquema gestionado con alembic).",
    )
    args = parser.parse_args()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
