# eva/api/v1/mantenimientos.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, OptionalPayload, Payload, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.db.models.mantenimiento import Mantenimiento
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.services.mantenimiento_service import MantenimientoService
from eva.services.resource_store import ResourceStore
from eva.services.resources import EQUIPOS, MANTENIMIENTOS

router = APIRouter(prefix="/api/mantenimientos", tags=["Mantenimientos"])
svc = MantenimientoService()


@router.get("/vencidos", summary="Mantenimientos pendientes con fecha programada pasada")
def vencidos(db: DbDep, clock: ClockDep, actor: ReaderDep):
    store = ResourceStore(db, MANTENIMIENTOS, actor)
    items = (
        svc.vencidos_query(db, clock.today())
           .order_by(Mantenimiento.fecha_programada.asc(), Mantenimiento.id.asc())
           .all()
    )
    return ok([store.serialize(m) for m in items], "Mantenimientos vencidos obtenidos exitosamente")


@router.get("/por-equipo/{equipo_id}", summary="Historial de mantenimientos de un equipo")
def por_equipo(equipo_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, EQUIPOS, actor).get(equipo_id)
    store = ResourceStore(db, MANTENIMIENTOS, actor)
    items = (
        store.base_query()
             .filter(Mantenimiento.equipo_id == equipo_id)
             .order_by(Mantenimiento.fecha_programada.desc(), Mantenimiento.id.desc())
             .all()
    )
    return ok([store.serialize(m) for m in items], "Mantenimientos del equipo obtenidos exitosamente")


@router.patch("/{item_id}/completar", summary="Marcar mantenimiento como completado")
def completar(item_id: IdPath, db: DbDep, clock: ClockDep, actor: ReaderDep, payload: OptionalPayload = None):
    obj = svc.completar(db, item_id, payload or {}, actor, clock.today())
    store = ResourceStore(db, MANTENIMIENTOS, actor)
    return ok(store.serialize(obj), "Mantenimiento completado exitosamente")


@router.patch("/{item_id}/cancelar", summary="Cancelar mantenimiento")
def cancelar(item_id: IdPath, payload: Payload, db: DbDep, actor: ReaderDep):
    obj = svc.cancelar(db, item_id, payload, actor)
    store = ResourceStore(db, MANTENIMIENTOS, actor)
    return ok(store.serialize(obj), "Mantenimiento cancelado exitosamente")


mount_crud(router, MANTENIMIENTOS)
