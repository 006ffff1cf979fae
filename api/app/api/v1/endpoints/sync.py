"""
Endpoints para consultar la sincronizacion con TVMaze.
El sync corre como tarea en background desde el startup del API.
"""
from fastapi import APIRouter, Depends

from app.application.dto.sync_dto import SyncStatusDTO
from app.application.use_cases.catalog_sync_use_cases import CatalogSyncUseCases
from app.api.v1.dependencies.use_case_deps import get_catalog_sync_use_cases


router = APIRouter(prefix="/sync", tags=["Sync"])


@router.get(
    "/status",
    response_model=SyncStatusDTO,
    summary="Estado del sync TVMaze"
)
async def get_sync_status(
    use_cases: CatalogSyncUseCases = Depends(get_catalog_sync_use_cases)
) -> SyncStatusDTO:
    """
    Retorna si el sync esta habilitado, si esta corriendo y el
    resultado o error de la ultima corrida.
    """
    return use_cases.get_status()
