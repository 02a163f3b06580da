# eva/schemas/observaciones.py
from __future__ import annotations
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import EquipoBrief, UsuarioBrief


class ObservacionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    descripcion: str
    observacion: str
    recomendacion: Optional[str] = None
    tipo: str
    estado: str
    prioridad: str
    equipo_id: Optional[int] = None
    equipo: Optional[EquipoBrief] = None
    mantenimiento_id: Optional[int] = None
    fecha: date
    fecha_limite: Optional[date] = None
    responsable_id: Optional[int] = None
    responsable: Optional[UsuarioBrief] = None
    costo_estimado: Optional[float] = None
    tiempo_estimado: Optional[int] = None
    solucion: Optional[str] = None
    costo_real: Optional[float] = None
    tiempo_real: Optional[int] = None
    fecha_cierre: Optional[datetime] = None
    cerrada_por: Optional[int] = None
    created_at: datetime
    updated_at: datetime
