# eva/db/models/auditoria.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eva.db.base import Base


class AuditoriaLog(Base):
    """Bitácora append-only. Solo descripcion/observaciones son editables."""

    __tablename__ = "auditoria_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    usuario_id: Mapped[int | None] = mapped_column(Integer, index=True)
    # CREATE | UPDATE | DELETE | VIEW | LOGIN | LOGOUT
    accion: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    tabla: Mapped[str | None] = mapped_column(String(100), index=True)
    registro_id: Mapped[int | None] = mapped_column(Integer)
    descripcion: Mapped[str | None] = mapped_column(Text)
    datos_anteriores: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    datos_nuevos: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    ip_address: Mapped[str | None] = mapped_column(String(45))
    user_agent: Mapped[str | None] = mapped_column(String(512))
    observaciones: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now, index=True)
