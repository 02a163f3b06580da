# eva/api/v1/areas.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.db.models.area import Area
from eva.dependencies.db import DbDep
from eva.services.resource_store import ResourceStore
from eva.services.resources import AREAS, SERVICIOS

router = APIRouter(prefix="/api/areas", tags=["Áreas"])


@router.get("/por-servicio/{servicio_id}", summary="Áreas activas de un servicio")
def por_servicio(servicio_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, SERVICIOS, actor).get(servicio_id)
    store = ResourceStore(db, AREAS, actor)
    items = (
        store.base_query()
             .filter(Area.servicio_id == servicio_id, Area.status == True)  # noqa: E712
             .order_by(Area.name, Area.id)
             .all()
    )
    return ok([store.serialize(a) for a in items], "Áreas del servicio obtenidas exitosamente")


mount_crud(router, AREAS)
