# eva/schemas/areas.py
from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import ServicioBrief


class AreaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    codigo: Optional[str] = None
    servicio_id: Optional[int] = None
    servicio: Optional[ServicioBrief] = None
    piso: Optional[str] = None
    capacidad: Optional[int] = None
    responsable: Optional[str] = None
    telefono: Optional[str] = None
    status: bool
    created_at: datetime
    updated_at: datetime
