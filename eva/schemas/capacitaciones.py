# eva/schemas/capacitaciones.py
from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from eva.schemas.briefs import UsuarioBrief


class CapacitacionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    titulo: str
    descripcion: str
    tipo: str
    modalidad: str
    fecha_inicio: datetime
    fecha_fin: datetime
    duracion_horas: int
    instructor_id: int
    instructor: Optional[UsuarioBrief] = None
    lugar: Optional[str] = None
    capacidad_maxima: Optional[int] = None
    costo: Optional[float] = None
    certificacion: bool
    estado: str
    tema: Optional[str] = None
    objetivos: Optional[str] = None
    requisitos: Optional[str] = None
    observaciones_finales: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ParticipanteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    capacitacion_id: int
    usuario_id: int
    usuario: Optional[UsuarioBrief] = None
    fecha_inscripcion: datetime
    asistio: bool
    calificacion: Optional[float] = None
    aprobado: bool
    observaciones: Optional[str] = None
