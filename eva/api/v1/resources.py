# eva/api/v1/resources.py
"""
Rutas CRUD genéricas a partir de un ResourceSpec.

Cada router de entidad declara primero sus rutas estáticas (/activos, /criticos,
/por-equipo/{id}, ...) y al final llama a `mount_crud`, de modo que `/{item_id}`
no capture segmentos literales.
"""
from typing import Annotated, Any, Callable

from fastapi import APIRouter, Body, Depends, Path, Request

from eva.core.envelope import created, ok
from eva.core.security import ADMIN, require_roles
from eva.dependencies.db import DbDep
from eva.schemas.auth import ActorContext
from eva.services.query_builder import params_from_request
from eva.services.resource_store import ResourceSpec, ResourceStore

IdPath = Annotated[int, Path(...)]
Payload = Annotated[dict[str, Any], Body(...)]
OptionalPayload = Annotated[dict[str, Any] | None, Body()]
ReaderDep = Annotated[ActorContext, Depends(require_roles("*"))]
AdminDep = Annotated[ActorContext, Depends(require_roles(ADMIN))]


def query_params(request: Request) -> dict[str, Any]:
    return params_from_request(request.query_params.multi_items())


def _plural_msg(spec: ResourceSpec, verbo: str) -> str:
    suffix = "as" if spec.femenino else "os"
    return f"{spec.plural} {verbo}{suffix} exitosamente"


def mount_activos(router: APIRouter, spec: ResourceSpec) -> None:
    """GET /activos: debe montarse antes que /{item_id}."""
    if not spec.status_field:
        return

    @router.get("/activos", summary=f"{spec.plural} activos (sin paginar)")
    def list_activos(db: DbDep, actor: ReaderDep):
        store = ResourceStore(db, spec, actor)
        activos = "activas obtenidas" if spec.femenino else "activos obtenidos"
        return ok([store.serialize(o) for o in store.active()], f"{spec.plural} {activos}")


def mount_crud(
    router: APIRouter,
    spec: ResourceSpec,
    detail: Callable[[ResourceStore, Any], dict] | None = None,
) -> APIRouter:
    """`detail` permite enriquecer la respuesta de GET /{item_id}."""
    Writer = Annotated[ActorContext, Depends(require_roles(*(spec.write_roles or ("*",))))]

    @router.get("", summary=f"Listado paginado de {spec.plural.lower()}")
    def list_items(request: Request, db: DbDep, actor: ReaderDep):
        page = ResourceStore(db, spec, actor).list(query_params(request))
        return ok(page, _plural_msg(spec, "obtenid"))

    mount_activos(router, spec)

    @router.post("", status_code=201, summary=f"Crear {spec.label.lower()}")
    def create_item(payload: Payload, db: DbDep, actor: Writer):
        store = ResourceStore(db, spec, actor)
        obj = store.create(payload)
        return created(store.serialize(obj), spec.msg("creado"))

    @router.get("/{item_id}", summary=f"Detalle de {spec.label.lower()}")
    def get_item(item_id: IdPath, db: DbDep, actor: ReaderDep):
        store = ResourceStore(db, spec, actor)
        obj = store.get(item_id)
        data = detail(store, obj) if detail else store.serialize(obj)
        return ok(data, spec.msg("obtenido"))

    @router.put("/{item_id}", summary=f"Actualizar {spec.label.lower()} (parcial)")
    def update_item(item_id: IdPath, payload: Payload, db: DbDep, actor: Writer):
        store = ResourceStore(db, spec, actor)
        obj = store.update(item_id, payload)
        return ok(store.serialize(obj), spec.msg("actualizado"))

    @router.delete("/{item_id}", summary=f"Eliminar {spec.label.lower()}")
    def delete_item(item_id: IdPath, db: DbDep, actor: Writer):
        ResourceStore(db, spec, actor).delete(item_id)
        return ok(None, spec.msg("eliminado"))

    if spec.status_field:
        @router.patch("/{item_id}/toggle-status", summary=f"Activar/desactivar {spec.label.lower()}")
        def toggle_item(item_id: IdPath, db: DbDep, actor: Writer):
            store = ResourceStore(db, spec, actor)
            obj = store.toggle(item_id)
            estado = "activado" if getattr(obj, spec.status_field) else "desactivado"
            return ok(store.serialize(obj), spec.msg(estado))

    return router


def build_resource_router(spec: ResourceSpec, prefix: str | None = None) -> APIRouter:
    """Router solo con el CRUD genérico (entidades sin rutas extra)."""
    router = APIRouter(prefix=prefix or f"/api/{spec.name}", tags=[spec.plural])
    return mount_crud(router, spec)
