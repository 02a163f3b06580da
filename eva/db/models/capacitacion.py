# eva/db/models/capacitacion.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Capacitacion(TimestampMixin, Base):
    __tablename__ = "capacitaciones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    titulo: Mapped[str] = mapped_column(String(255), nullable=False)
    descripcion: Mapped[str] = mapped_column(Text, nullable=False)

    # induccion | actualizacion | especializacion | certificacion
    tipo: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # presencial | virtual | mixta
    modalidad: Mapped[str] = mapped_column(String(20), nullable=False)

    fecha_inicio: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    fecha_fin: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duracion_horas: Mapped[int] = mapped_column(Integer, nullable=False)

    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("usuarios.id"), nullable=False)
    lugar: Mapped[str | None] = mapped_column(String(255))
    capacidad_maxima: Mapped[int | None] = mapped_column(Integer)
    costo: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    certificacion: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # programada | en_curso | completada | cancelada
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="programada", index=True)
    tema: Mapped[str | None] = mapped_column(String(255))
    objetivos: Mapped[str | None] = mapped_column(Text)
    requisitos: Mapped[str | None] = mapped_column(Text)
    observaciones_finales: Mapped[str | None] = mapped_column(Text)
    usuario_id: Mapped[int | None] = mapped_column(Integer)

    instructor = relationship("Usuario", foreign_keys=[instructor_id])


class CapacitacionParticipante(Base):
    """Inscripción de un usuario; la evaluación queda en la misma fila al finalizar."""

    __tablename__ = "capacitacion_participantes"
    __table_args__ = (UniqueConstraint("capacitacion_id", "usuario_id", name="uq_capacitacion_usuario"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    capacitacion_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("capacitaciones.id"), nullable=False, index=True,
    )
    usuario_id: Mapped[int] = mapped_column(Integer, ForeignKey("usuarios.id"), nullable=False, index=True)
    fecha_inscripcion: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    asistio: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    calificacion: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    aprobado: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    observaciones: Mapped[str | None] = mapped_column(Text)

    usuario = relationship("Usuario")
