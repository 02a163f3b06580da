# eva/api/v1/filtros.py
from fastapi import APIRouter

from eva.api.v1.resources import ReaderDep
from eva.core.envelope import ok
from eva.dependencies.db import DbDep
from eva.services.filtro_service import FiltroService

router = APIRouter(prefix="/api/filtros", tags=["Filtros"])
svc = FiltroService()


@router.get("", summary="Opciones para los selectores de filtro")
def opciones(db: DbDep, actor: ReaderDep):
    return ok(svc.opciones(db), "Opciones de filtros obtenidas exitosamente")


@router.get("/recursos", summary="Recursos con listado filtrable")
def recursos(actor: ReaderDep):
    return ok(svc.recursos(), "Recursos obtenidos exitosamente")


@router.get("/{recurso}", summary="Filtros, búsqueda y orden que acepta un recurso")
def por_recurso(recurso: str, actor: ReaderDep):
    return ok(svc.recurso(recurso), "Opciones del recurso obtenidas exitosamente")
