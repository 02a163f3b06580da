from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session

from eva.audit.sink import AccionAuditoria, AuditSink, snapshot
from eva.core.errors import NotFound
from eva.db.models.auditoria import AuditoriaLog
from eva.schemas.auditoria import AuditoriaOut
from eva.schemas.auth import ActorContext
from eva.services.query_builder import QueryBuilder
from eva.validation.rules import IsString, MaxLength, Nullable, validate

log = logging.getLogger("uvicorn.error")

# La bitácora solo admite anotaciones; el resto de columnas es inmutable
UPDATE_RULES = {
    "descripcion": [Nullable(), IsString(), MaxLength(1000)],
    "observaciones": [Nullable(), IsString(), MaxLength(1000)],
}

builder = QueryBuilder(
    AuditoriaLog,
    searchable=("accion", "tabla", "descripcion", "ip_address"),
    filterable=("usuario_id", "accion", "tabla", "registro_id"),
    date_field="created_at",
    sortable=("created_at", "accion", "tabla", "usuario_id"),
)


def _serialize(obj: AuditoriaLog) -> dict:
    return AuditoriaOut.model_validate(obj).model_dump(mode="json")


class AuditoriaService:
    def list(self, db: Session, params: Mapping[str, Any]) -> dict:
        params = dict(params)
        # fecha_inicio / fecha_fin son alias del rango de fechas
        if params.get("fecha_inicio") and not params.get("date_from"):
            params["date_from"] = params["fecha_inicio"]
        if params.get("fecha_fin") and not params.get("date_to"):
            params["date_to"] = params["fecha_fin"]
        return builder.list(db.query(AuditoriaLog), params, serializer=_serialize)

    def get(self, db: Session, log_id: int) -> AuditoriaLog:
        obj = db.get(AuditoriaLog, log_id)
        if not obj:
            raise NotFound("Registro de auditoría no encontrado")
        return obj

    def update(self, db: Session, log_id: int, payload: Mapping[str, Any]) -> AuditoriaLog:
        obj = self.get(db, log_id)
        data = validate(db, UPDATE_RULES, payload, partial=True)
        for k, v in data.items():
            setattr(obj, k, v)
        db.commit()
        db.refresh(obj)
        return obj

    def delete(self, db: Session, log_id: int, actor: ActorContext) -> None:
        obj = self.get(db, log_id)
        AuditSink(db).record(
            actor.id, AccionAuditoria.DELETE, AuditoriaLog.__tablename__, obj.id,
            f"Eliminación de registro de auditoría ID: {obj.id}",
            before=snapshot(obj),
        )
        db.delete(obj)
        db.commit()
        log.info("[AUDIT] entrada %s eliminada por usuario=%s", log_id, actor.id)

    def estadisticas(self, db: Session, now: datetime) -> dict:
        hoy = datetime.combine(now.date(), datetime.min.time())
        semana = hoy - timedelta(days=now.weekday())

        def _count(*criterios) -> int:
            return db.query(func.count(AuditoriaLog.id)).filter(*criterios).scalar() or 0

        por_accion = dict(
            db.query(AuditoriaLog.accion, func.count(AuditoriaLog.id))
              .group_by(AuditoriaLog.accion)
              .all()
        )
        por_tabla = dict(
            db.query(AuditoriaLog.tabla, func.count(AuditoriaLog.id))
              .filter(AuditoriaLog.tabla != None)  # noqa: E711
              .group_by(AuditoriaLog.tabla)
              .all()
        )
        usuarios_activos = (
            db.query(func.count(func.distinct(AuditoriaLog.usuario_id)))
              .filter(AuditoriaLog.usuario_id != None, AuditoriaLog.created_at >= semana)  # noqa: E711
              .scalar()
        ) or 0
        return {
            "total_registros": _count(),
            "por_accion": por_accion,
            "por_tabla": por_tabla,
            "usuarios_activos": usuarios_activos,
            "registros_hoy": _count(AuditoriaLog.created_at >= hoy),
            "registros_semana": _count(AuditoriaLog.created_at >= semana),
        }
