# eva/api/v1/equipos.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.db.models.equipo import Equipo
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.services.equipo_service import EquipoService
from eva.services.resource_store import ResourceStore
from eva.services.resources import AREAS, EQUIPOS, SERVICIOS

router = APIRouter(prefix="/api/equipos", tags=["Equipos"])
svc = EquipoService()


@router.get("/criticos", summary="Equipos activos con riesgo IIB/III")
def criticos(db: DbDep, actor: ReaderDep):
    store = ResourceStore(db, EQUIPOS, actor)
    items = svc.criticos_query(db).order_by(Equipo.riesgo.desc(), Equipo.name, Equipo.id).all()
    return ok([store.serialize(e) for e in items], "Equipos críticos obtenidos exitosamente")


@router.get("/estadisticas", summary="Indicadores del inventario de equipos")
def estadisticas(db: DbDep, clock: ClockDep, actor: ReaderDep):
    return ok(svc.estadisticas(db, clock.today()), "Estadísticas de equipos obtenidas exitosamente")


@router.get("/por-servicio/{servicio_id}", summary="Equipos de un servicio")
def por_servicio(servicio_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, SERVICIOS, actor).get(servicio_id)
    store = ResourceStore(db, EQUIPOS, actor)
    items = store.base_query().filter(Equipo.servicio_id == servicio_id).order_by(Equipo.name, Equipo.id).all()
    return ok([store.serialize(e) for e in items], "Equipos del servicio obtenidos exitosamente")


@router.get("/por-area/{area_id}", summary="Equipos de un área")
def por_area(area_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, AREAS, actor).get(area_id)
    store = ResourceStore(db, EQUIPOS, actor)
    items = store.base_query().filter(Equipo.area_id == area_id).order_by(Equipo.name, Equipo.id).all()
    return ok([store.serialize(e) for e in items], "Equipos del área obtenidos exitosamente")


mount_crud(router, EQUIPOS)
