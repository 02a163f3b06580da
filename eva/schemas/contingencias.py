# eva/schemas/contingencias.py
from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import EquipoBrief


class ContingenciaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    equipo_id: int
    equipo: Optional[EquipoBrief] = None
    fecha: datetime
    observacion: str
    severidad: str
    tipo: Optional[str] = None
    estado: str
    usuario_reporta: Optional[int] = None
    usuario_asignado: Optional[int] = None
    solucion: Optional[str] = None
    fecha_cierre: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
