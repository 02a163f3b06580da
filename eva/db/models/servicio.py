# eva/db/models/servicio.py
from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Servicio(TimestampMixin, Base):
    __tablename__ = "servicios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    codigo: Mapped[str | None] = mapped_column(String(50), unique=True)
    responsable: Mapped[str | None] = mapped_column(String(255))
    telefono: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255))
    ubicacion: Mapped[str | None] = mapped_column(String(255))
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Usuario que registró el servicio (referencia débil)
    usuario_id: Mapped[int | None] = mapped_column(Integer)

    areas = relationship("Area", back_populates="servicio", order_by="Area.name")
