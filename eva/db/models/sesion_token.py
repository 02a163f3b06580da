# eva/db/models/sesion_token.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from eva.db.base import Base


class SesionToken(Base):
    """Un registro por login; el `jti` del JWT apunta aquí. Logout lo revoca."""

    __tablename__ = "sesion_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    usuario_id: Mapped[int] = mapped_column(Integer, ForeignKey("usuarios.id"), nullable=False, index=True)
    jti: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    creado: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    expira: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    revocado: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
