# eva/db/models/archivo.py
from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eva.db.base import Base, TimestampMixin


class Archivo(TimestampMixin, Base):
    __tablename__ = "archivos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    # Nombre original (descarga) y ruta relativa a FILES_DIR
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    extension: Mapped[str | None] = mapped_column(String(20))
    mime_type: Mapped[str | None] = mapped_column(String(150))

    # manual | imagen | documento | certificado | reporte | otro
    tipo: Mapped[str] = mapped_column(String(20), nullable=False)
    categoria: Mapped[str | None] = mapped_column(String(100))

    equipo_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("equipos.id"), index=True)
    usuario_id: Mapped[int | None] = mapped_column(Integer)
    publico: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    descargas: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    equipo = relationship("Equipo")
