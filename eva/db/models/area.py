# eva/db/models/area.py
from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Area(TimestampMixin, Base):
    __tablename__ = "areas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    codigo: Mapped[str | None] = mapped_column(String(50), unique=True)

    # Un área puede existir sin servicio asignado
    servicio_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("servicios.id"))

    piso: Mapped[str | None] = mapped_column(String(50))
    capacidad: Mapped[int | None] = mapped_column(Integer)
    responsable: Mapped[str | None] = mapped_column(String(255))
    telefono: Mapped[str | None] = mapped_column(String(50))
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    usuario_id: Mapped[int | None] = mapped_column(Integer)  # referencia débil al actor

    servicio = relationship("Servicio", back_populates="areas")
