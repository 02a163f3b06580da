"""
Agregados del dashboard.

`main_stats` se cachea bajo una clave fija durante DASHBOARD_CACHE_TTL_SECONDS.
Las escrituras no invalidan la caché: el resumen puede ir atrasado hasta el TTL.
"Hoy" sale del Clock inyectado, nunca de datetime.now() directo.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from eva.core.cache import TTLCache
from eva.core.clock import Clock
from eva.core.config import settings
from eva.db.models.auditoria import AuditoriaLog
from eva.db.models.calibracion import Calibracion
from eva.db.models.contingencia import Contingencia
from eva.db.models.equipo import Equipo
from eva.db.models.mantenimiento import Mantenimiento
from eva.db.models.repuesto import Repuesto
from eva.db.models.rol import Rol
from eva.db.models.servicio import Servicio
from eva.db.models.usuario import Usuario
from eva.schemas.auditoria import AuditoriaOut
from eva.services.resources import MANT_PENDIENTES, RIESGOS_CRITICOS

log = logging.getLogger("uvicorn.error")

MAIN_STATS_KEY = "dashboard_main_stats"
DIAS_PROXIMO_MANTENIMIENTO = 7
DIAS_PROXIMA_CALIBRACION = 30
MAX_MESES = 12


def _pct(parte: int, total: int) -> float:
    return round(parte / total * 100, 1) if total > 0 else 0


def _month_back(today: date, n: int) -> tuple[int, int]:
    """(año, mes) de n meses calendario antes de `today`."""
    idx = today.year * 12 + (today.month - 1) - n
    return idx // 12, idx % 12 + 1


class DashboardService:
    def __init__(self, db: Session, clock: Clock, cache: TTLCache):
        self.db = db
        self.clock = clock
        self.cache = cache

    def _count(self, model, *criterios) -> int:
        return self.db.query(func.count(model.id)).filter(*criterios).scalar() or 0

    # -------------------- Resumen principal (cacheado) --------------------
    def main_stats(self) -> dict:
        return self.cache.remember(MAIN_STATS_KEY, settings.DASHBOARD_CACHE_TTL_SECONDS, self._build_main_stats)

    def _build_main_stats(self) -> dict:
        log.info("[DASHBOARD] recalculando %s", MAIN_STATS_KEY)
        return {
            "equipos": self._equipos(),
            "mantenimientos": self._mantenimientos(),
            "contingencias": self._contingencias(),
            "calibraciones": self._calibraciones(),
            "usuarios": self._usuarios(),
            "generado_en": self.clock.now().isoformat(),
        }

    def _equipos(self) -> dict:
        today = self.clock.today()
        total = self._count(Equipo)
        activos = self._count(Equipo, Equipo.status == True)  # noqa: E712
        criticos = self._count(Equipo, Equipo.status == True, Equipo.riesgo.in_(RIESGOS_CRITICOS))  # noqa: E712
        vencido = (
            self.db.query(func.count(func.distinct(Mantenimiento.equipo_id)))
                .filter(Mantenimiento.status.in_(MANT_PENDIENTES), Mantenimiento.fecha_programada < today)
                .scalar()
        ) or 0
        return {
            "total": total,
            "activos": activos,
            "inactivos": total - activos,
            "criticos": criticos,
            "con_mantenimiento_vencido": vencido,
            "porcentaje_activos": _pct(activos, total),
        }

    def _mantenimientos(self) -> dict:
        today = self.clock.today()
        M = Mantenimiento
        total = self._count(M)
        completados = self._count(M, M.status == "completado")
        return {
            "total": total,
            "programados": self._count(M, M.status == "programado"),
            "en_proceso": self._count(M, M.status == "en_proceso"),
            "completados": completados,
            "vencidos": self._count(M, M.status.in_(MANT_PENDIENTES), M.fecha_programada < today),
            "proximos_vencer": self._count(
                M, M.status == "programado",
                M.fecha_programada >= today,
                M.fecha_programada <= today + timedelta(days=DIAS_PROXIMO_MANTENIMIENTO),
            ),
            "eficiencia": _pct(completados, total),
        }

    def _contingencias(self) -> dict:
        C = Contingencia
        total = self._count(C)
        resueltas = self._count(C, C.estado.in_(("Resuelto", "Cerrado")))
        return {
            "total": total,
            "abiertas": self._count(C, C.estado != "Cerrado"),
            "criticas": self._count(C, C.severidad.in_(("Alta", "Crítica")), C.estado != "Cerrado"),
            "resueltas": resueltas,
            "tasa_resolucion": _pct(resueltas, total),
        }

    def _calibraciones(self) -> dict:
        today = self.clock.today()
        K = Calibracion
        total = self._count(K)
        vigentes = self._count(
            K, K.estado == "completada",
            (K.fecha_vencimiento == None) | (K.fecha_vencimiento >= today),  # noqa: E711
        )
        return {
            "total": total,
            "vigentes": vigentes,
            "vencidas": self._count(K, K.fecha_vencimiento < today, K.estado != "no_aplica"),
            "proximas_vencer": self._count(
                K, K.estado == "completada",
                K.fecha_vencimiento >= today,
                K.fecha_vencimiento <= today + timedelta(days=DIAS_PROXIMA_CALIBRACION),
            ),
            "cumplimiento": _pct(vigentes, total),
        }

    def _usuarios(self) -> dict:
        por_rol = {
            nombre: n
            for nombre, n in (
                self.db.query(Rol.nombre, func.count(Usuario.id))
                    .join(Usuario, Usuario.rol_id == Rol.id)
                    .filter(Usuario.estado == True)  # noqa: E712
                    .group_by(Rol.nombre)
                    .all()
            )
        }
        return {
            "total": self._count(Usuario),
            "activos": self._count(Usuario, Usuario.estado == True),  # noqa: E712
            "por_rol": por_rol,
        }

    # -------------------- Gráficos --------------------
    def mantenimientos_por_mes(self, meses: int = MAX_MESES) -> list[dict]:
        """Últimos N meses calendario (incluye el actual), del más antiguo al más reciente."""
        meses = max(1, min(MAX_MESES, int(meses or MAX_MESES)))
        today = self.clock.today()
        M = Mantenimiento
        out = []
        for n in range(meses - 1, -1, -1):
            year, month = _month_back(today, n)
            en_mes = (
                extract("year", M.fecha_programada) == year,
                extract("month", M.fecha_programada) == month,
            )
            out.append({
                "mes": f"{year:04d}-{month:02d}",
                "programados": self._count(M, *en_mes),
                "completados": self._count(M, M.status == "completado", *en_mes),
            })
        return out

    def equipos_por_servicio(self, limit: int = 10) -> list[dict]:
        total = func.count(Equipo.id).label("total")
        rows = (
            self.db.query(Servicio.id, Servicio.name, total)
                .join(Equipo, Equipo.servicio_id == Servicio.id)
                .filter(Equipo.status == True)  # noqa: E712
                .group_by(Servicio.id, Servicio.name)
                .order_by(total.desc(), Servicio.name)
                .limit(limit)
                .all()
        )
        return [{"servicio_id": sid, "servicio": name, "total": n} for sid, name, n in rows]

    # -------------------- Alertas / actividad --------------------
    def alertas(self) -> list[dict]:
        today = self.clock.today()
        M, K, C = Mantenimiento, Calibracion, Contingencia
        candidatas = [
            ("danger", "Mantenimientos Vencidos", "Hay {n} mantenimiento(s) vencido(s)", "/mantenimientos/vencidos",
             self._count(M, M.status.in_(MANT_PENDIENTES), M.fecha_programada < today)),
            ("danger", "Calibraciones Vencidas", "Hay {n} calibración(es) vencida(s)", "/calibraciones/vencidas",
             self._count(K, K.fecha_vencimiento < today, K.estado != "no_aplica")),
            ("warning", "Calibraciones por Vencer", "Hay {n} calibración(es) que vence(n) en 30 días", "/calibraciones",
             self._count(K, K.estado == "completada", K.fecha_vencimiento >= today,
                         K.fecha_vencimiento <= today + timedelta(days=DIAS_PROXIMA_CALIBRACION))),
            ("danger", "Contingencias Críticas", "Hay {n} contingencia(s) crítica(s) abiertas", "/contingencias/criticas",
             self._count(C, C.severidad.in_(("Alta", "Crítica")), C.estado != "Cerrado")),
            ("warning", "Repuestos Bajo Stock", "Hay {n} repuesto(s) bajo el stock mínimo", "/repuestos/bajo-stock",
             self._count(Repuesto, Repuesto.estado == "activo", Repuesto.stock_actual <= Repuesto.stock_minimo)),
        ]
        return [
            {"type": tipo, "title": titulo, "message": msg.format(n=n), "count": n, "action": accion}
            for tipo, titulo, msg, accion, n in candidatas
            if n > 0
        ]

    def actividad_reciente(self, limit: int = 10) -> list[dict]:
        limit = max(1, min(50, int(limit or 10)))
        rows = (
            self.db.query(AuditoriaLog)
                .order_by(AuditoriaLog.created_at.desc(), AuditoriaLog.id.desc())
                .limit(limit)
                .all()
        )
        return [AuditoriaOut.model_validate(r).model_dump(mode="json") for r in rows]

    def clear_cache(self) -> None:
        self.cache.forget(MAIN_STATS_KEY)
