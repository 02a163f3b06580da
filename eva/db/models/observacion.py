# eva/db/models/observacion.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Observacion(TimestampMixin, Base):
    __tablename__ = "observaciones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    descripcion: Mapped[str] = mapped_column(String(500), nullable=False)
    observacion: Mapped[str] = mapped_column(Text, nullable=False)
    recomendacion: Mapped[str | None] = mapped_column(Text)

    # preventivo | correctivo | calibracion | inspeccion | general
    tipo: Mapped[str] = mapped_column(String(20), nullable=False, default="general")
    # abierta | en_proceso | cerrada | cancelada
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="abierta", index=True)
    # baja | media | alta | critica
    prioridad: Mapped[str] = mapped_column(String(20), nullable=False, default="media")

    equipo_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("equipos.id"), index=True)
    mantenimiento_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("mantenimientos.id"), index=True)

    fecha: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_limite: Mapped[date | None] = mapped_column(Date)
    responsable_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("usuarios.id"))
    costo_estimado: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    tiempo_estimado: Mapped[int | None] = mapped_column(Integer)  # horas

    solucion: Mapped[str | None] = mapped_column(Text)
    costo_real: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    tiempo_real: Mapped[int | None] = mapped_column(Integer)
    fecha_cierre: Mapped[datetime | None] = mapped_column(DateTime)
    cerrada_por: Mapped[int | None] = mapped_column(Integer, ForeignKey("usuarios.id"))
    usuario_id: Mapped[int | None] = mapped_column(Integer)

    equipo = relationship("Equipo")
    mantenimiento = relationship("Mantenimiento")
    responsable = relationship("Usuario", foreign_keys=[responsable_id])
