# eva/schemas/briefs.py
# Vistas mínimas para relaciones anidadas en las respuestas
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict


class ServicioBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    codigo: Optional[str] = None


class AreaBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    codigo: Optional[str] = None
    status: bool = True


class PropietarioBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str


class EquipoBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    code: str


class RolBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str


class UsuarioBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str
    apellido: str
