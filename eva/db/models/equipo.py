# eva/db/models/equipo.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Equipo(TimestampMixin, Base):
    __tablename__ = "equipos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    marca: Mapped[str | None] = mapped_column(String(100))
    modelo: Mapped[str | None] = mapped_column(String(100))
    serial: Mapped[str | None] = mapped_column(String(100))
    descripcion: Mapped[str | None] = mapped_column(Text)

    # FKs
    servicio_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("servicios.id"), index=True)
    area_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("areas.id"), index=True)
    propietario_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("propietarios.id"))

    # Clasificación de riesgo biomédico (I, IIA, IIB, III)
    riesgo: Mapped[str | None] = mapped_column(String(10))
    costo: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))

    fecha_adquisicion: Mapped[date | None] = mapped_column(Date)
    fecha_instalacion: Mapped[date | None] = mapped_column(Date)
    vida_util: Mapped[int | None] = mapped_column(Integer)  # años
    fecha_mantenimiento: Mapped[date | None] = mapped_column(Date)
    fecha_proximo_mantenimiento: Mapped[date | None] = mapped_column(Date)

    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    usuario_id: Mapped[int | None] = mapped_column(Integer)  # referencia débil al actor

    servicio = relationship("Servicio")
    area = relationship("Area")
    propietario = relationship("Propietario")
