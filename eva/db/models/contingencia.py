# eva/db/models/contingencia.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Contingencia(TimestampMixin, Base):
    __tablename__ = "contingencias"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipo_id: Mapped[int] = mapped_column(Integer, ForeignKey("equipos.id"), nullable=False, index=True)
    fecha: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    observacion: Mapped[str] = mapped_column(Text, nullable=False)

    # Baja | Media | Alta | Crítica
    severidad: Mapped[str] = mapped_column(String(20), nullable=False, default="Media")
    # Falla | Incidente | Evento Adverso | Mantenimiento Urgente
    tipo: Mapped[str | None] = mapped_column(String(50))
    # Abierto | En Proceso | Resuelto | Cerrado
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="Abierto")

    usuario_reporta: Mapped[int | None] = mapped_column(Integer, ForeignKey("usuarios.id"))
    usuario_asignado: Mapped[int | None] = mapped_column(Integer, ForeignKey("usuarios.id"))
    solucion: Mapped[str | None] = mapped_column(Text)
    fecha_cierre: Mapped[datetime | None] = mapped_column(DateTime)

    equipo = relationship("Equipo")
