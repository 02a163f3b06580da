# eva/db/models/calibracion.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Calibracion(TimestampMixin, Base):
    __tablename__ = "calibraciones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipo_id: Mapped[int] = mapped_column(Integer, ForeignKey("equipos.id"), nullable=False, index=True)
    fecha: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_vencimiento: Mapped[date | None] = mapped_column(Date)

    # interna | externa | verificacion | ajuste
    tipo: Mapped[str] = mapped_column(String(20), nullable=False, default="externa")
    # programada | en_proceso | completada | vencida | no_aplica
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="programada")

    proveedor: Mapped[str | None] = mapped_column(String(255))
    certificado: Mapped[str | None] = mapped_column(String(255))
    observaciones: Mapped[str | None] = mapped_column(Text)
    costo: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    usuario_id: Mapped[int | None] = mapped_column(Integer)

    equipo = relationship("Equipo")
