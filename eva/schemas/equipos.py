# eva/schemas/equipos.py
from __future__ import annotations
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import AreaBrief, PropietarioBrief, ServicioBrief


class EquipoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    code: str
    marca: Optional[str] = None
    modelo: Optional[str] = None
    serial: Optional[str] = None
    descripcion: Optional[str] = None

    servicio_id: Optional[int] = None
    area_id: Optional[int] = None
    propietario_id: Optional[int] = None
    servicio: Optional[ServicioBrief] = None
    area: Optional[AreaBrief] = None
    propietario: Optional[PropietarioBrief] = None

    riesgo: Optional[str] = None
    costo: Optional[float] = None
    fecha_adquisicion: Optional[date] = None
    fecha_instalacion: Optional[date] = None
    vida_util: Optional[int] = None
    fecha_mantenimiento: Optional[date] = None
    fecha_proximo_mantenimiento: Optional[date] = None
    status: bool
    usuario_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
