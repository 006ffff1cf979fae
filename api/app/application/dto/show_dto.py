"""
DTOs del endpoint de consulta del catalogo.
"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field


class CastMemberDTO(BaseModel):
    """Persona del reparto. birthday se serializa como YYYY-MM-DD."""

    id: int = Field(..., description="ID de la persona en TVMaze")
    name: Optional[str] = Field(None, description="Nombre de la persona")
    birthday: Optional[date] = Field(None, description="Fecha de nacimiento")

    class Config:
        from_attributes = True


class ShowDTO(BaseModel):
    """Show con su reparto ordenado por fecha de nacimiento descendente."""

    id: int = Field(..., description="ID del show en TVMaze")
    name: Optional[str] = Field(None, description="Nombre del show")
    cast: List[CastMemberDTO] = Field(default_factory=list, description="Reparto")

    class Config:
        from_attributes = True
