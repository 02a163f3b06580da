# eva/schemas/archivos.py
from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, computed_field

from eva.schemas.briefs import EquipoBrief


def format_file_size(size: int | None) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size or 0)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2)} {units[i]}"


class ArchivoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    file_name: str
    file_size: int
    extension: Optional[str] = None
    mime_type: Optional[str] = None
    tipo: str
    categoria: Optional[str] = None
    equipo_id: Optional[int] = None
    equipo: Optional[EquipoBrief] = None
    usuario_id: Optional[int] = None
    publico: bool
    descargas: int
    activo: bool
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def file_size_formatted(self) -> str:
        return format_file_size(self.file_size)
