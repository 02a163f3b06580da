# eva/api/v1/servicios.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.dependencies.db import DbDep
from eva.services.resource_store import ResourceStore
from eva.services.resources import SERVICIOS
from eva.services.servicio_service import ServicioService

router = APIRouter(prefix="/api/servicios", tags=["Servicios"])
svc = ServicioService()


@router.get("/jerarquia", summary="Servicios activos con sus áreas")
def jerarquia(db: DbDep, actor: ReaderDep):
    return ok(svc.jerarquia(db), "Jerarquía de servicios obtenida exitosamente")


@router.get("/{item_id}/estadisticas", summary="Indicadores de un servicio")
def estadisticas(item_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, SERVICIOS, actor).get(item_id)
    return ok(svc.estadisticas(db, item_id), "Estadísticas del servicio obtenidas exitosamente")


def _detalle(store: ResourceStore, obj) -> dict:
    data = store.serialize(obj)
    data["estadisticas"] = svc.estadisticas(store.db, obj.id)
    return data


mount_crud(router, SERVICIOS, detail=_detalle)
