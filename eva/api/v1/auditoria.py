# eva/api/v1/auditoria.py
from fastapi import APIRouter, Request

from eva.api.v1.resources import AdminDep, IdPath, Payload, ReaderDep, query_params
from eva.core.envelope import ok
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.services.auditoria_service import AuditoriaService, _serialize

router = APIRouter(prefix="/api/auditoria", tags=["Auditoría"])
svc = AuditoriaService()


@router.get("", summary="Bitácora paginada")
def list_auditoria(request: Request, db: DbDep, actor: ReaderDep):
    return ok(svc.list(db, query_params(request)), "Registros de auditoría obtenidos exitosamente")


@router.get("/estadisticas", summary="Indicadores de la bitácora")
def estadisticas(db: DbDep, clock: ClockDep, actor: ReaderDep):
    return ok(svc.estadisticas(db, clock.now()), "Estadísticas de auditoría obtenidas exitosamente")


@router.get("/{log_id}", summary="Detalle de un registro")
def get_auditoria(log_id: IdPath, db: DbDep, actor: ReaderDep):
    return ok(_serialize(svc.get(db, log_id)), "Registro de auditoría obtenido exitosamente")


@router.put("/{log_id}", summary="Editar descripción/observaciones")
def update_auditoria(log_id: IdPath, payload: Payload, db: DbDep, actor: ReaderDep):
    return ok(_serialize(svc.update(db, log_id, payload)), "Registro de auditoría actualizado exitosamente")


@router.delete("/{log_id}", summary="(Administrador) Eliminar registro")
def delete_auditoria(log_id: IdPath, db: DbDep, actor: AdminDep):
    svc.delete(db, log_id, actor)
    return ok(None, "Registro de auditoría eliminado exitosamente")
