# eva/schemas/contactos.py
from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import EquipoBrief


class ContactoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str
    email: Optional[str] = None
    telefono: Optional[str] = None
    cargo: Optional[str] = None
    empresa: Optional[str] = None
    tipo: Optional[str] = None
    equipo_id: Optional[int] = None
    equipo: Optional[EquipoBrief] = None
    activo: bool
    created_at: datetime
    updated_at: datetime
