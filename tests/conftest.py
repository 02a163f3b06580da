import os

# Settings se instancia al importar eva.*: el entorno va primero
os.environ.setdefault("JWT_SECRET", "test-secret-eva")
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from eva.core.cache import cache  # noqa: E402
from eva.core.clock import FixedClock, get_clock  # noqa: E402
from eva.core.config import settings  # noqa: E402
from eva.core.security import hash_password  # noqa: E402
from eva.db.models.area import Area  # noqa: E402
from eva.db.models.calibracion import Calibracion  # noqa: E402
from eva.db.models.capacitacion import Capacitacion, CapacitacionParticipante  # noqa: E402
from eva.db.models.contingencia import Contingencia  # noqa: E402
from eva.db.models.equipo import Equipo  # noqa: E402
from eva.db.models.mantenimiento import Mantenimiento  # noqa: E402
from eva.db.models.observacion import Observacion  # noqa: E402
from eva.db.models.repuesto import Repuesto  # noqa: E402
from eva.db.models.rol import Rol  # noqa: E402
from eva.db.models.servicio import Servicio  # noqa: E402
from eva.db.models.usuario import Usuario  # noqa: E402
from eva.db.session import get_db, init_db  # noqa: E402
from eva.main import app  # noqa: E402

# "Hoy" fijo para todos los agregados por fecha
NOW = datetime(2025, 6, 15, 10, 30, 0)
TODAY = NOW.date()
PASSWORD = "secreto123"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def client(session_factory, clock, tmp_path):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    original_files_dir = settings.FILES_DIR
    settings.FILES_DIR = str(tmp_path / "storage")
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    cache.clear()

    # Sin context manager: no se ejecuta el lifespan (init_db sobre la BD real)
    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
    settings.FILES_DIR = original_files_dir
    cache.clear()


# ───────────────────────────────────────────────────────────────────────────────
# Datos de prueba
# ───────────────────────────────────────────────────────────────────────────────

class Factory:
    """Inserta filas directo en BD (sin pasar por la API ni por la bitácora)."""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def rol(self, nombre: str) -> Rol:
        return self.db.query(Rol).filter(Rol.nombre == nombre).one()

    def usuario(self, rol: str = "Administrador", **kw) -> Usuario:
        n = self._next()
        data = {
            "nombre": "Ana",
            "apellido": "Pérez",
            "email": f"usuario{n}@hospital.com",
            "username": f"usuario{n}",
            "password": hash_password(PASSWORD),
            "rol_id": self.rol(rol).id,
            "estado": True,
        }
        data.update(kw)
        return self._save(Usuario(**data))

    def servicio(self, **kw) -> Servicio:
        n = self._next()
        data = {"name": f"Servicio {n}", "codigo": f"SRV-{n}", "activo": True}
        data.update(kw)
        return self._save(Servicio(**data))

    def area(self, servicio=None, **kw) -> Area:
        n = self._next()
        data = {"name": f"Área {n}", "codigo": f"AR-{n}", "status": True,
                "servicio_id": servicio.id if servicio else None}
        data.update(kw)
        return self._save(Area(**data))

    def equipo(self, servicio=None, area=None, **kw) -> Equipo:
        n = self._next()
        data = {"name": f"Monitor {n}", "code": f"EQ-{n:04d}", "status": True,
                "servicio_id": servicio.id if servicio else None,
                "area_id": area.id if area else None}
        data.update(kw)
        return self._save(Equipo(**data))

    def mantenimiento(self, equipo, **kw) -> Mantenimiento:
        data = {"equipo_id": equipo.id, "description": "Revisión general", "tipo": "preventivo",
                "prioridad": "media", "status": "programado", "fecha_programada": TODAY}
        data.update(kw)
        return self._save(Mantenimiento(**data))

    def calibracion(self, equipo, **kw) -> Calibracion:
        data = {"equipo_id": equipo.id, "fecha": date(2025, 1, 10), "tipo": "externa", "estado": "completada"}
        data.update(kw)
        return self._save(Calibracion(**data))

    def contingencia(self, equipo, **kw) -> Contingencia:
        data = {"equipo_id": equipo.id, "fecha": NOW, "observacion": "No enciende",
                "severidad": "Media", "estado": "Abierto"}
        data.update(kw)
        return self._save(Contingencia(**data))

    def repuesto(self, **kw) -> Repuesto:
        n = self._next()
        data = {"nombre": f"Sensor {n}", "codigo": f"REP-{n}", "categoria": "Sensores",
                "stock_actual": 10, "stock_minimo": 2, "unidad_medida": "unidad",
                "critico": False, "estado": "activo"}
        data.update(kw)
        return self._save(Repuesto(**data))

    def capacitacion(self, instructor, **kw) -> Capacitacion:
        n = self._next()
        data = {"titulo": f"Curso {n}", "descripcion": "Uso seguro de monitores", "tipo": "actualizacion",
                "modalidad": "presencial", "fecha_inicio": datetime(2025, 7, 1, 9, 0),
                "fecha_fin": datetime(2025, 7, 1, 13, 0), "duracion_horas": 4,
                "instructor_id": instructor.id, "certificacion": False, "estado": "programada"}
        data.update(kw)
        return self._save(Capacitacion(**data))

    def participante(self, capacitacion, usuario, **kw) -> CapacitacionParticipante:
        data = {"capacitacion_id": capacitacion.id, "usuario_id": usuario.id, "fecha_inscripcion": NOW}
        data.update(kw)
        return self._save(CapacitacionParticipante(**data))

    def observacion(self, equipo=None, **kw) -> Observacion:
        data = {"descripcion": "Cable de poder desgastado", "observacion": "Se observa aislamiento roto",
                "tipo": "inspeccion", "estado": "abierta", "prioridad": "media", "fecha": TODAY,
                "equipo_id": equipo.id if equipo else None}
        data.update(kw)
        return self._save(Observacion(**data))


@pytest.fixture
def make(db):
    return Factory(db)


@pytest.fixture
def login_as(client):
    """Devuelve headers Bearer para un usuario existente."""
    def _login(username: str, password: str = PASSWORD) -> dict:
        resp = client.post("/api/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['data']['token']}"}
    return _login


@pytest.fixture
def admin(make):
    return make.usuario("Administrador", username="admin", email="admin@hospital.com")


@pytest.fixture
def auth_headers(login_as, admin):
    return login_as("admin")


@pytest.fixture
def tecnico_headers(login_as, make):
    make.usuario("Tecnico", username="tecnico", email="tecnico@hospital.com")
    return login_as("tecnico")
