# eva/schemas/servicios.py
from __future__ import annotations
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import AreaBrief


class ServicioOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    codigo: Optional[str] = None
    responsable: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    ubicacion: Optional[str] = None
    activo: bool
    usuario_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ServicioJerarquia(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    codigo: Optional[str] = None
    activo: bool
    areas: List[AreaBrief] = []
