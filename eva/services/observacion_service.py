from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from eva.audit.sink import AccionAuditoria, AuditSink
from eva.core.errors import BusinessRuleError, NotFound
from eva.db.models.observacion import Observacion
from eva.schemas.auth import ActorContext
from eva.services.resources import OBS_PRIORIDADES, OBS_TIPOS
from eva.validation.rules import IsInteger, IsNumeric, IsString, MinValue, Nullable, Required, validate

log = logging.getLogger("uvicorn.error")

DIAS_PROXIMAS_VENCER = 7

CERRAR_RULES = {
    "solucion": [Required(), IsString()],
    "costo_real": [Nullable(), IsNumeric(), MinValue(0)],
    "tiempo_real": [Nullable(), IsInteger(), MinValue(1)],
}


class ObservacionService:
    def _get(self, db: Session, observacion_id: int) -> Observacion:
        obj = (
            db.query(Observacion)
              .options(selectinload(Observacion.equipo), selectinload(Observacion.responsable))
              .filter(Observacion.id == observacion_id)
              .first()
        )
        if not obj:
            raise NotFound("Observación no encontrada")
        return obj

    def cerrar(
        self, db: Session, observacion_id: int, payload: Mapping[str, Any],
        actor: ActorContext, now: datetime,
    ) -> Observacion:
        obj = self._get(db, observacion_id)
        data = validate(db, CERRAR_RULES, payload)
        if obj.estado == "cerrada":
            raise BusinessRuleError("La observación ya está cerrada")
        if obj.estado == "cancelada":
            raise BusinessRuleError("No se puede cerrar una observación cancelada")

        previo = obj.estado
        obj.estado = "cerrada"
        obj.solucion = data["solucion"]
        obj.costo_real = data.get("costo_real")
        obj.tiempo_real = data.get("tiempo_real")
        obj.fecha_cierre = now
        obj.cerrada_por = actor.id
        AuditSink(db).record(
            actor.id, AccionAuditoria.UPDATE, Observacion.__tablename__, obj.id,
            f"Observación cerrada ID: {obj.id}",
            {"estado": previo}, {"estado": obj.estado, "fecha_cierre": now},
        )
        db.commit()
        db.refresh(obj)
        log.info("[OBS] cerrada id=%s actor=%s", obj.id, actor.id)
        return obj

    def estadisticas(self, db: Session, today: date) -> dict:
        O = Observacion
        abiertas = O.estado.notin_(("cerrada", "cancelada"))

        def contar(*criterios) -> int:
            return db.query(func.count(O.id)).filter(*criterios).scalar() or 0

        def agrupar(col, claves) -> dict:
            rows = dict(db.query(col, func.count(O.id)).group_by(col).all())
            return {k: rows.get(k, 0) for k in claves}

        return {
            "total": contar(),
            "abiertas": contar(O.estado == "abierta"),
            "en_proceso": contar(O.estado == "en_proceso"),
            "cerradas": contar(O.estado == "cerrada"),
            "por_tipo": agrupar(O.tipo, OBS_TIPOS),
            "por_prioridad": agrupar(O.prioridad, OBS_PRIORIDADES),
            "vencidas": contar(abiertas, O.fecha_limite < today),
            "proximas_vencer": contar(
                abiertas, O.fecha_limite >= today,
                O.fecha_limite <= today + timedelta(days=DIAS_PROXIMAS_VENCER),
            ),
        }
