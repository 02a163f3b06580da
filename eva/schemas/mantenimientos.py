# eva/schemas/mantenimientos.py
from __future__ import annotations
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import EquipoBrief, UsuarioBrief


class MantenimientoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    equipo_id: int
    equipo: Optional[EquipoBrief] = None
    description: str
    tipo: str
    prioridad: str
    status: str
    fecha_programada: date
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None
    tecnico_id: Optional[int] = None
    tecnico: Optional[UsuarioBrief] = None
    proveedor: Optional[str] = None
    costo: Optional[float] = None
    observaciones: Optional[str] = None
    motivo_cancelacion: Optional[str] = None
    created_at: datetime
    updated_at: datetime
