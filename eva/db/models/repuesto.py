# eva/db/models/repuesto.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Repuesto(TimestampMixin, Base):
    __tablename__ = "repuestos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    codigo: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    descripcion: Mapped[str | None] = mapped_column(Text)
    categoria: Mapped[str] = mapped_column(String(100), nullable=False)
    marca: Mapped[str | None] = mapped_column(String(100))
    modelo: Mapped[str | None] = mapped_column(String(100))

    stock_actual: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stock_minimo: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    precio_unitario: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    unidad_medida: Mapped[str] = mapped_column(String(50), nullable=False, default="unidad")
    ubicacion: Mapped[str | None] = mapped_column(String(255))

    equipo_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("equipos.id"))
    critico: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # activo | inactivo | descontinuado
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="activo")

    equipo = relationship("Equipo")


class MovimientoRepuesto(Base):
    """Entrada/salida de inventario. Solo inserción."""

    __tablename__ = "movimientos_repuestos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repuesto_id: Mapped[int] = mapped_column(Integer, ForeignKey("repuestos.id"), nullable=False, index=True)
    tipo: Mapped[str] = mapped_column(String(10), nullable=False)  # entrada | salida
    cantidad: Mapped[int] = mapped_column(Integer, nullable=False)
    stock_anterior: Mapped[int] = mapped_column(Integer, nullable=False)
    stock_nuevo: Mapped[int] = mapped_column(Integer, nullable=False)
    motivo: Mapped[str] = mapped_column(Text, nullable=False)
    usuario_id: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
