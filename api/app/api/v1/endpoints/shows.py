"""
Endpoints de consulta del catalogo sincronizado desde TVMaze.
"""
from typing import List
from fastapi import APIRouter, Depends, Query

from app.application.dto.show_dto import ShowDTO
from app.application.use_cases.catalog_use_cases import CatalogUseCases
from app.api.v1.dependencies.use_case_deps import get_catalog_use_cases

router = APIRouter(prefix="/shows", tags=["Shows"])


@router.get("", response_model=List[ShowDTO])
async def list_shows(
    page: int = Query(default=0, description="Numero de pagina (desde 0)"),
    use_cases: CatalogUseCases = Depends(get_catalog_use_cases)
):
    """
    Obtener una pagina de shows ordenados por ID, con su reparto
    ordenado por fecha de nacimiento descendente.
    """
    return await use_cases.get_shows_page(page)
