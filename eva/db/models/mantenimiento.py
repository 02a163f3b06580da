# eva/db/models/mantenimiento.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Mantenimiento(TimestampMixin, Base):
    __tablename__ = "mantenimientos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipo_id: Mapped[int] = mapped_column(Integer, ForeignKey("equipos.id"), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)

    # preventivo | correctivo | calibracion | verificacion
    tipo: Mapped[str] = mapped_column(String(20), nullable=False, default="preventivo")
    # baja | media | alta | critica
    prioridad: Mapped[str] = mapped_column(String(20), nullable=False, default="media")
    # programado | en_proceso | completado | cancelado
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="programado")

    fecha_programada: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_inicio: Mapped[date | None] = mapped_column(Date)
    fecha_fin: Mapped[date | None] = mapped_column(Date)

    tecnico_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("usuarios.id"))
    proveedor: Mapped[str | None] = mapped_column(String(255))
    costo: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    observaciones: Mapped[str | None] = mapped_column(Text)
    motivo_cancelacion: Mapped[str | None] = mapped_column(Text)
    usuario_id: Mapped[int | None] = mapped_column(Integer)

    equipo = relationship("Equipo")
    tecnico = relationship("Usuario", foreign_keys=[tecnico_id])
