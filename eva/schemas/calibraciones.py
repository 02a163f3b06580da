# eva/schemas/calibraciones.py
from __future__ import annotations
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import EquipoBrief


class CalibracionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    equipo_id: int
    equipo: Optional[EquipoBrief] = None
    fecha: date
    fecha_vencimiento: Optional[date] = None
    tipo: str
    estado: str
    proveedor: Optional[str] = None
    certificado: Optional[str] = None
    observaciones: Optional[str] = None
    costo: Optional[float] = None
    created_at: datetime
    updated_at: datetime
