from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping

from sqlalchemy.orm import Session, selectinload

from eva.audit.sink import AccionAuditoria, AuditSink
from eva.core.errors import BusinessRuleError, NotFound
from eva.db.models.equipo import Equipo
from eva.db.models.mantenimiento import Mantenimiento
from eva.schemas.auth import ActorContext
from eva.services.resources import MANT_PENDIENTES
from eva.validation.rules import IsNumeric, IsString, MaxLength, MinValue, Nullable, Required, validate

log = logging.getLogger("uvicorn.error")

COMPLETAR_RULES = {
    "observaciones": [Nullable(), IsString()],
    "costo": [Nullable(), IsNumeric(), MinValue(0)],
}
CANCELAR_RULES = {
    "motivo_cancelacion": [Required(), IsString(), MaxLength(500)],
}


class MantenimientoService:
    def _get(self, db: Session, mantenimiento_id: int) -> Mantenimiento:
        obj = (
            db.query(Mantenimiento)
              .options(selectinload(Mantenimiento.equipo), selectinload(Mantenimiento.tecnico))
              .filter(Mantenimiento.id == mantenimiento_id)
              .first()
        )
        if not obj:
            raise NotFound("Mantenimiento no encontrado")
        return obj

    def vencidos_query(self, db: Session, today: date):
        """Programados o en proceso con fecha_programada anterior a hoy."""
        return (
            db.query(Mantenimiento)
              .options(selectinload(Mantenimiento.equipo))
              .filter(Mantenimiento.status.in_(MANT_PENDIENTES),
                      Mantenimiento.fecha_programada < today)
        )

    def completar(
        self, db: Session, mantenimiento_id: int, payload: Mapping[str, Any],
        actor: ActorContext, today: date,
    ) -> Mantenimiento:
        obj = self._get(db, mantenimiento_id)
        data = validate(db, COMPLETAR_RULES, payload)
        if obj.status == "completado":
            raise BusinessRuleError("El mantenimiento ya está completado")
        if obj.status == "cancelado":
            raise BusinessRuleError("No se puede completar un mantenimiento cancelado")

        previo = obj.status
        obj.status = "completado"
        obj.fecha_fin = today
        if obj.fecha_inicio is None:
            obj.fecha_inicio = today
        if data.get("observaciones") is not None:
            obj.observaciones = data["observaciones"]
        if data.get("costo") is not None:
            obj.costo = data["costo"]

        equipo = db.get(Equipo, obj.equipo_id)
        if equipo is not None:
            equipo.fecha_mantenimiento = today

        AuditSink(db).record(
            actor.id, AccionAuditoria.UPDATE, Mantenimiento.__tablename__, obj.id,
            f"Mantenimiento completado ID: {obj.id}",
            {"status": previo}, {"status": obj.status, "fecha_fin": today},
        )
        db.commit()
        db.refresh(obj)
        log.info("[MANT] completado id=%s actor=%s", obj.id, actor.id)
        return obj

    def cancelar(
        self, db: Session, mantenimiento_id: int, payload: Mapping[str, Any], actor: ActorContext,
    ) -> Mantenimiento:
        obj = self._get(db, mantenimiento_id)
        data = validate(db, CANCELAR_RULES, payload)
        if obj.status == "completado":
            raise BusinessRuleError("No se puede cancelar un mantenimiento completado")
        if obj.status == "cancelado":
            raise BusinessRuleError("El mantenimiento ya está cancelado")

        previo = obj.status
        obj.status = "cancelado"
        obj.motivo_cancelacion = data["motivo_cancelacion"]
        AuditSink(db).record(
            actor.id, AccionAuditoria.UPDATE, Mantenimiento.__tablename__, obj.id,
            f"Mantenimiento cancelado ID: {obj.id}",
            {"status": previo}, {"status": obj.status, "motivo_cancelacion": obj.motivo_cancelacion},
        )
        db.commit()
        db.refresh(obj)
        log.info("[MANT] cancelado id=%s actor=%s", obj.id, actor.id)
        return obj
