# eva/api/v1/calibraciones.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.db.models.calibracion import Calibracion
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.services.calibracion_service import CalibracionService
from eva.services.resource_store import ResourceStore
from eva.services.resources import CALIBRACIONES, EQUIPOS

router = APIRouter(prefix="/api/calibraciones", tags=["Calibraciones"])
svc = CalibracionService()


@router.get("/vencidas", summary="Calibraciones con fecha de vencimiento pasada")
def vencidas(db: DbDep, clock: ClockDep, actor: ReaderDep):
    store = ResourceStore(db, CALIBRACIONES, actor)
    items = (
        svc.vencidas_query(db, clock.today())
           .order_by(Calibracion.fecha_vencimiento.asc(), Calibracion.id.asc())
           .all()
    )
    return ok([store.serialize(c) for c in items], "Calibraciones vencidas obtenidas exitosamente")


@router.get("/por-equipo/{equipo_id}", summary="Calibraciones de un equipo")
def por_equipo(equipo_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, EQUIPOS, actor).get(equipo_id)
    store = ResourceStore(db, CALIBRACIONES, actor)
    items = (
        store.base_query()
             .filter(Calibracion.equipo_id == equipo_id)
             .order_by(Calibracion.fecha.desc(), Calibracion.id.desc())
             .all()
    )
    return ok([store.serialize(c) for c in items], "Calibraciones del equipo obtenidas exitosamente")


mount_crud(router, CALIBRACIONES)
