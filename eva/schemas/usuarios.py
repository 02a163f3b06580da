# eva/schemas/usuarios.py
from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import RolBrief, ServicioBrief


class UsuarioOut(BaseModel):
    # Nunca expone el hash de password
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str
    apellido: str
    email: str
    username: str
    telefono: Optional[str] = None
    rol_id: int
    rol: Optional[RolBrief] = None
    servicio_id: Optional[int] = None
    servicio: Optional[ServicioBrief] = None
    estado: bool
    ultimo_acceso: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
