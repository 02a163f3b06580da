# eva/api/v1/dashboard.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from eva.api.v1.resources import AdminDep, ReaderDep
from eva.core.envelope import ok
from eva.dependencies.context import CacheDep, ClockDep
from eva.dependencies.db import DbDep
from eva.services.dashboard_service import MAX_MESES, DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


def get_dashboard(db: DbDep, clock: ClockDep, cache: CacheDep) -> DashboardService:
    return DashboardService(db, clock, cache)


DashboardDep = Annotated[DashboardService, Depends(get_dashboard)]


@router.get("/estadisticas", summary="Resumen principal (cacheado)")
def estadisticas(svc: DashboardDep, actor: ReaderDep):
    return ok(svc.main_stats(), "Estadísticas obtenidas exitosamente")


@router.get("/grafico-mantenimientos", summary="Mantenimientos programados/completados por mes")
def grafico_mantenimientos(
    svc: DashboardDep,
    actor: ReaderDep,
    meses: int = Query(MAX_MESES, ge=1, le=MAX_MESES),
):
    return ok(svc.mantenimientos_por_mes(meses), "Gráfico de mantenimientos obtenido exitosamente")


@router.get("/equipos-por-servicio", summary="Top 10 servicios por equipos activos")
def equipos_por_servicio(svc: DashboardDep, actor: ReaderDep):
    return ok(svc.equipos_por_servicio(), "Equipos por servicio obtenidos exitosamente")


@router.get("/alertas", summary="Alertas operativas")
def alertas(svc: DashboardDep, actor: ReaderDep):
    return ok(svc.alertas(), "Alertas obtenidas exitosamente")


@router.get("/actividad-reciente", summary="Últimas entradas de la bitácora")
def actividad_reciente(
    svc: DashboardDep,
    actor: ReaderDep,
    limit: int = Query(10, ge=1, le=50),
):
    return ok(svc.actividad_reciente(limit), "Actividad reciente obtenida exitosamente")


@router.delete("/cache", summary="(Administrador) Limpiar caché del dashboard")
def clear_cache(svc: DashboardDep, actor: AdminDep):
    svc.clear_cache()
    return ok(None, "Caché del dashboard limpiada exitosamente")
