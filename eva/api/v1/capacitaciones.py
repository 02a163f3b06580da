# eva/api/v1/capacitaciones.py
from fastapi import APIRouter, Query

from eva.api.v1.resources import IdPath, OptionalPayload, Payload, ReaderDep, mount_crud
from eva.core.envelope import created, ok
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.schemas.capacitaciones import ParticipanteOut
from eva.services.capacitacion_service import CapacitacionService
from eva.services.resource_store import ResourceStore
from eva.services.resources import CAPACITACIONES

router = APIRouter(prefix="/api/capacitaciones", tags=["Capacitaciones"])
svc = CapacitacionService()


def _participante(p) -> dict:
    return ParticipanteOut.model_validate(p).model_dump(mode="json")


@router.get("/programadas", summary="Capacitaciones programadas que aún no comienzan")
def programadas(db: DbDep, clock: ClockDep, actor: ReaderDep):
    store = ResourceStore(db, CAPACITACIONES, actor)
    items = svc.programadas_query(db, clock.now()).all()
    return ok([store.serialize(c) for c in items], "Capacitaciones programadas obtenidas exitosamente")


@router.get("/estadisticas", summary="Indicadores anuales de capacitación")
def estadisticas(
    db: DbDep,
    clock: ClockDep,
    actor: ReaderDep,
    year: int | None = Query(None, ge=2000, le=2100),
):
    return ok(svc.estadisticas(db, year or clock.today().year), "Estadísticas obtenidas exitosamente")


@router.get("/{item_id}/participantes", summary="Participantes inscritos")
def participantes(item_id: IdPath, db: DbDep, actor: ReaderDep):
    return ok([_participante(p) for p in svc.participantes(db, item_id)],
              "Participantes obtenidos exitosamente")


@router.post("/{item_id}/inscribir", status_code=201, summary="Inscribir un usuario")
def inscribir(item_id: IdPath, payload: Payload, db: DbDep, clock: ClockDep, actor: ReaderDep):
    p = svc.inscribir(db, item_id, payload, actor, clock.now())
    return created(_participante(p), "Usuario inscrito exitosamente")


@router.delete("/{item_id}/participantes/{usuario_id}", summary="Retirar un participante")
def desinscribir(item_id: IdPath, usuario_id: IdPath, db: DbDep, actor: ReaderDep):
    svc.desinscribir(db, item_id, usuario_id, actor)
    return ok(None, "Participante retirado exitosamente")


@router.patch("/{item_id}/iniciar", summary="Pasar de programada a en curso")
def iniciar(item_id: IdPath, db: DbDep, actor: ReaderDep):
    obj = svc.iniciar(db, item_id, actor)
    return ok(ResourceStore(db, CAPACITACIONES, actor).serialize(obj), "Capacitación iniciada exitosamente")


@router.patch("/{item_id}/finalizar", summary="Completar con la evaluación de participantes")
def finalizar(item_id: IdPath, db: DbDep, actor: ReaderDep, payload: OptionalPayload = None):
    obj = svc.finalizar(db, item_id, payload or {}, actor)
    return ok(ResourceStore(db, CAPACITACIONES, actor).serialize(obj), "Capacitación finalizada exitosamente")


@router.patch("/{item_id}/cancelar", summary="Cancelar capacitación")
def cancelar(item_id: IdPath, db: DbDep, actor: ReaderDep):
    obj = svc.cancelar(db, item_id, actor)
    return ok(ResourceStore(db, CAPACITACIONES, actor).serialize(obj), "Capacitación cancelada exitosamente")


def _detalle(store: ResourceStore, obj) -> dict:
    data = store.serialize(obj)
    data["participantes"] = [_participante(p) for p in svc.participantes(store.db, obj.id)]
    return data


mount_crud(router, CAPACITACIONES, detail=_detalle)
