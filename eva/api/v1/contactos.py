# eva/api/v1/contactos.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.db.models.contacto import Contacto
from eva.dependencies.db import DbDep
from eva.services.resource_store import ResourceStore
from eva.services.resources import CONTACTOS, EQUIPOS

router = APIRouter(prefix="/api/contactos", tags=["Contactos"])


@router.get("/por-equipo/{equipo_id}", summary="Contactos activos de un equipo")
def por_equipo(equipo_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, EQUIPOS, actor).get(equipo_id)
    store = ResourceStore(db, CONTACTOS, actor)
    items = (
        store.base_query()
             .filter(Contacto.equipo_id == equipo_id, Contacto.activo == True)  # noqa: E712
             .order_by(Contacto.nombre, Contacto.id)
             .all()
    )
    return ok([store.serialize(c) for c in items], "Contactos del equipo obtenidos exitosamente")


mount_crud(router, CONTACTOS)
