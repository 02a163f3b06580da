# eva/schemas/repuestos.py
from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, computed_field

from eva.schemas.briefs import EquipoBrief


class RepuestoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str
    codigo: str
    descripcion: Optional[str] = None
    categoria: str
    marca: Optional[str] = None
    modelo: Optional[str] = None
    stock_actual: int
    stock_minimo: int
    precio_unitario: Optional[float] = None
    unidad_medida: str
    ubicacion: Optional[str] = None
    equipo_id: Optional[int] = None
    equipo: Optional[EquipoBrief] = None
    critico: bool
    estado: str
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def bajo_stock(self) -> bool:
        return self.stock_actual <= self.stock_minimo


class MovimientoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    repuesto_id: int
    tipo: str
    cantidad: int
    stock_anterior: int
    stock_nuevo: int
    motivo: str
    usuario_id: Optional[int] = None
    created_at: datetime
