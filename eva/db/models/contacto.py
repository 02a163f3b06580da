# eva/db/models/contacto.py
from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Contacto(TimestampMixin, Base):
    __tablename__ = "contactos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    telefono: Mapped[str | None] = mapped_column(String(50))
    cargo: Mapped[str | None] = mapped_column(String(100))
    empresa: Mapped[str | None] = mapped_column(String(255))
    # proveedor | tecnico | soporte | comercial | administrativo
    tipo: Mapped[str | None] = mapped_column(String(20))
    equipo_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("equipos.id"), index=True)
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    equipo = relationship("Equipo")
