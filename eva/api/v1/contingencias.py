# eva/api/v1/contingencias.py
from fastapi import APIRouter

from eva.api.v1.resources import IdPath, Payload, ReaderDep, mount_crud
from eva.core.envelope import ok
from eva.db.models.contingencia import Contingencia
from eva.dependencies.context import ClockDep
from eva.dependencies.db import DbDep
from eva.services.contingencia_service import ContingenciaService
from eva.services.resource_store import ResourceStore
from eva.services.resources import CONTINGENCIAS, EQUIPOS

router = APIRouter(prefix="/api/contingencias", tags=["Contingencias"])
svc = ContingenciaService()


@router.get("/criticas", summary="Contingencias Alta/Crítica no cerradas")
def criticas(db: DbDep, actor: ReaderDep):
    store = ResourceStore(db, CONTINGENCIAS, actor)
    items = svc.criticas_query(db).order_by(Contingencia.fecha.desc(), Contingencia.id.desc()).all()
    return ok([store.serialize(c) for c in items], "Contingencias críticas obtenidas exitosamente")


@router.get("/por-equipo/{equipo_id}", summary="Contingencias de un equipo")
def por_equipo(equipo_id: IdPath, db: DbDep, actor: ReaderDep):
    ResourceStore(db, EQUIPOS, actor).get(equipo_id)
    store = ResourceStore(db, CONTINGENCIAS, actor)
    items = (
        store.base_query()
             .filter(Contingencia.equipo_id == equipo_id)
             .order_by(Contingencia.fecha.desc(), Contingencia.id.desc())
             .all()
    )
    return ok([store.serialize(c) for c in items], "Contingencias del equipo obtenidas exitosamente")


@router.patch("/{item_id}/cerrar", summary="Cerrar contingencia con su solución")
def cerrar(item_id: IdPath, payload: Payload, db: DbDep, clock: ClockDep, actor: ReaderDep):
    obj = svc.cerrar(db, item_id, payload, actor, clock.now())
    return ok(ResourceStore(db, CONTINGENCIAS, actor).serialize(obj), "Contingencia cerrada exitosamente")


@router.patch("/{item_id}/asignar", summary="Asignar responsable a la contingencia")
def asignar(item_id: IdPath, payload: Payload, db: DbDep, actor: ReaderDep):
    obj = svc.asignar(db, item_id, payload, actor)
    return ok(ResourceStore(db, CONTINGENCIAS, actor).serialize(obj), "Contingencia asignada exitosamente")


mount_crud(router, CONTINGENCIAS)
