# eva/db/session.py
from __future__ import annotations

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from eva.core.config import settings

log = logging.getLogger("uvicorn.error")


def build_engine(url: str) -> Engine:
    kwargs: dict = {
        "pool_pre_ping": True,     # detecta conexiones muertas
        "echo": settings.DB_ECHO,
        "future": True,
    }
    if url.startswith("sqlite"):
        # FastAPI ejecuta endpoints sync en un threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_recycle"] = 1800  # recicla conexiones viejas
    eng = create_engine(url, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(eng, "connect")
        def _sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    return eng


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


DEFAULT_ROLES = (
    ("Administrador", "Acceso total al sistema"),
    ("Tecnico", "Gestión de mantenimientos, calibraciones y contingencias"),
    ("Usuario", "Consulta y reporte de contingencias"),
)


def init_db(bind: Engine | None = None) -> None:
    """Crea tablas y siembra los roles base (idempotente)."""
    from eva.db.base import Base
    import eva.db.models  # noqa: F401  registra los modelos
    from eva.db.models.rol import Rol

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    with Session(bind=bind) as db:
        existentes = {r.nombre for r in db.query(Rol).all()}
        nuevos = [Rol(nombre=n, descripcion=d) for n, d in DEFAULT_ROLES if n not in existentes]
        if nuevos:
            db.add_all(nuevos)
            db.commit()
            log.info("[DB] roles base creados: %s", ", ".join(r.nombre for r in nuevos))
