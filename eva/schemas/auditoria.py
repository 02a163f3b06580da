# eva/schemas/auditoria.py
from __future__ import annotations
from typing import Any, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class AuditoriaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    usuario_id: Optional[int] = None
    accion: str
    tabla: Optional[str] = None
    registro_id: Optional[int] = None
    descripcion: Optional[str] = None
    datos_anteriores: Optional[Any] = None
    datos_nuevos: Optional[Any] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    observaciones: Optional[str] = None
    created_at: datetime
