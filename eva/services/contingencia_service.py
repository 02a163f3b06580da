from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy.orm import Session, selectinload

from eva.audit.sink import AccionAuditoria, AuditSink
from eva.core.errors import BusinessRuleError, NotFound
from eva.db.models.contingencia import Contingencia
from eva.db.models.usuario import Usuario
from eva.schemas.auth import ActorContext
from eva.validation.rules import Exists, IsInteger, IsString, MaxLength, Required, validate

log = logging.getLogger("uvicorn.error")

CERRAR_RULES = {"solucion": [Required(), IsString(), MaxLength(1000)]}
ASIGNAR_RULES = {"usuario_asignado": [Required(), IsInteger(), Exists(Usuario)]}


class ContingenciaService:
    def _get(self, db: Session, contingencia_id: int) -> Contingencia:
        obj = (
            db.query(Contingencia)
              .options(selectinload(Contingencia.equipo))
              .filter(Contingencia.id == contingencia_id)
              .first()
        )
        if not obj:
            raise NotFound("Contingencia no encontrada")
        return obj

    def criticas_query(self, db: Session):
        """Severidad Alta/Crítica que aún no están cerradas."""
        return (
            db.query(Contingencia)
              .options(selectinload(Contingencia.equipo))
              .filter(Contingencia.severidad.in_(("Alta", "Crítica")),
                      Contingencia.estado != "Cerrado")
        )

    def cerrar(
        self, db: Session, contingencia_id: int, payload: Mapping[str, Any],
        actor: ActorContext, now: datetime,
    ) -> Contingencia:
        obj = self._get(db, contingencia_id)
        data = validate(db, CERRAR_RULES, payload)
        if obj.estado == "Cerrado":
            raise BusinessRuleError("La contingencia ya está cerrada")

        previo = obj.estado
        obj.estado = "Cerrado"
        obj.solucion = data["solucion"]
        obj.fecha_cierre = now
        AuditSink(db).record(
            actor.id, AccionAuditoria.UPDATE, Contingencia.__tablename__, obj.id,
            f"Contingencia cerrada ID: {obj.id}",
            {"estado": previo}, {"estado": obj.estado, "fecha_cierre": now},
        )
        db.commit()
        db.refresh(obj)
        log.info("[CONT] cerrada id=%s actor=%s", obj.id, actor.id)
        return obj

    def asignar(
        self, db: Session, contingencia_id: int, payload: Mapping[str, Any], actor: ActorContext,
    ) -> Contingencia:
        obj = self._get(db, contingencia_id)
        data = validate(db, ASIGNAR_RULES, payload)
        if obj.estado == "Cerrado":
            raise BusinessRuleError("No se puede asignar una contingencia cerrada")

        before = {"usuario_asignado": obj.usuario_asignado, "estado": obj.estado}
        obj.usuario_asignado = data["usuario_asignado"]
        obj.estado = "En Proceso"
        AuditSink(db).record(
            actor.id, AccionAuditoria.UPDATE, Contingencia.__tablename__, obj.id,
            f"Contingencia asignada ID: {obj.id}",
            before, {"usuario_asignado": obj.usuario_asignado, "estado": obj.estado},
        )
        db.commit()
        db.refresh(obj)
        return obj
