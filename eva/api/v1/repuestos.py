# eva/api/v1/repuestos.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, Payload, ReaderDep, mount_crud
from eva.core.envelope import created, ok
from eva.dependencies.db import DbDep
from eva.schemas.repuestos import MovimientoOut
from eva.services.repuesto_service import RepuestoService
from eva.services.resource_store import ResourceStore
from eva.services.resources import REPUESTOS

router = APIRouter(prefix="/api/repuestos", tags=["Repuestos"])
svc = RepuestoService()


def _movimiento_body(store: ResourceStore, repuesto, mov) -> dict:
    return {
        "repuesto": store.serialize(repuesto),
        "movimiento": MovimientoOut.model_validate(mov).model_dump(mode="json"),
    }


@router.get("/bajo-stock", summary="Repuestos activos con stock <= mínimo")
def bajo_stock(db: DbDep, actor: ReaderDep):
    store = ResourceStore(db, REPUESTOS, actor)
    return ok([store.serialize(r) for r in svc.bajo_stock_query(db).all()],
              "Repuestos con bajo stock obtenidos exitosamente")


@router.get("/{item_id}/movimientos", summary="Historial de movimientos de stock")
def movimientos(item_id: IdPath, db: DbDep, actor: ReaderDep):
    items = svc.movimientos(db, item_id)
    return ok([MovimientoOut.model_validate(m).model_dump(mode="json") for m in items],
              "Movimientos obtenidos exitosamente")


@router.post("/{item_id}/entrada", status_code=201, summary="Registrar entrada de stock")
def entrada(item_id: IdPath, payload: Payload, db: DbDep, actor: ReaderDep):
    repuesto, mov = svc.movimiento(db, item_id, "entrada", payload, actor)
    return created(_movimiento_body(ResourceStore(db, REPUESTOS, actor), repuesto, mov),
                   "Entrada de stock registrada exitosamente")


@router.post("/{item_id}/salida", status_code=201, summary="Registrar salida de stock")
def salida(item_id: IdPath, payload: Payload, db: DbDep, actor: ReaderDep):
    repuesto, mov = svc.movimiento(db, item_id, "salida", payload, actor)
    return created(_movimiento_body(ResourceStore(db, REPUESTOS, actor), repuesto, mov),
                   "Salida de stock registrada exitosamente")


mount_crud(router, REPUESTOS)
