# eva/api/v1/observaciones.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, Payload, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.db.models.observacion import Observacion
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.services.observacion_service import ObservacionService
from eva.services.resource_store import ResourceStore
from eva.services.resources import EQUIPOS, MANTENIMIENTOS, OBSERVACIONES

router = APIRouter(prefix="/api/observaciones", tags=["Observaciones"])
svc = ObservacionService()


@router.get("/estadisticas", summary="Conteos por estado, tipo y prioridad; vencidas")
def estadisticas(db: DbDep, clock: ClockDep, actor: ReaderDep):
    return ok(svc.estadisticas(db, clock.today()), "Estadísticas obtenidas exitosamente")


@router.get("/por-equipo/{equipo_id}", summary="Observaciones de un equipo")
def por_equipo(equipo_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, EQUIPOS, actor).get(equipo_id)
    store = ResourceStore(db, OBSERVACIONES, actor)
    items = (
        store.base_query()
             .filter(Observacion.equipo_id == equipo_id)
             .order_by(Observacion.fecha.desc(), Observacion.id.desc())
             .all()
    )
    return ok([store.serialize(o) for o in items], "Observaciones del equipo obtenidas exitosamente")


@router.get("/por-mantenimiento/{mantenimiento_id}", summary="Observaciones de un mantenimiento")
def por_mantenimiento(mantenimiento_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, MANTENIMIENTOS, actor).get(mantenimiento_id)
    store = ResourceStore(db, OBSERVACIONES, actor)
    items = (
        store.base_query()
             .filter(Observacion.mantenimiento_id == mantenimiento_id)
             .order_by(Observacion.fecha.desc(), Observacion.id.desc())
             .all()
    )
    return ok([store.serialize(o) for o in items], "Observaciones del mantenimiento obtenidas exitosamente")


@router.patch("/{item_id}/cerrar", summary="Cerrar observación con su solución")
def cerrar(item_id: IdPath, payload: Payload, db: DbDep, clock: ClockDep, actor: ReaderDep):
    obj = svc.cerrar(db, item_id, payload, actor, clock.now())
    return ok(ResourceStore(db, OBSERVACIONES, actor).serialize(obj), "Observación cerrada exitosamente")


mount_crud(router, OBSERVACIONES)
