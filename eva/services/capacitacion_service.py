"""
Ciclo de vida de una capacitación: programada -> en_curso -> completada, o
cancelada desde cualquier estado abierto. La inscripción respeta la capacidad
máxima y al finalizar se evalúa a cada participante (aprueba con nota >= 70 y
asistencia).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import extract, func
from sqlalchemy.orm import Session, selectinload

from eva.audit.sink import AccionAuditoria, AuditSink
from eva.core.errors import BusinessRuleError, NotFound, ValidationFailed
from eva.db.models.capacitacion import Capacitacion, CapacitacionParticipante
from eva.db.models.usuario import Usuario
from eva.schemas.auth import ActorContext
from eva.services.resources import CAP_MODALIDADES, CAP_TIPOS
from eva.validation.rules import (
    Exists, IsBoolean, IsInteger, IsNumeric, IsString, MaxValue, MinValue, Nullable, Required,
    run_rules, validate,
)

log = logging.getLogger("uvicorn.error")

NOTA_APROBACION = 70

INSCRIBIR_RULES = {
    "usuario_id": [Required(), IsInteger(), Exists(Usuario)],
}
FINALIZAR_RULES = {
    "observaciones_finales": [Nullable(), IsString()],
}
EVALUACION_RULES = {
    "usuario_id": [Required(), IsInteger()],
    "calificacion": [Required(), IsNumeric(), MinValue(0), MaxValue(100)],
    "asistio": [Required(), IsBoolean()],
    "observaciones": [Nullable(), IsString()],
}


class CapacitacionService:
    def _get(self, db: Session, capacitacion_id: int) -> Capacitacion:
        obj = (
            db.query(Capacitacion)
              .options(selectinload(Capacitacion.instructor))
              .filter(Capacitacion.id == capacitacion_id)
              .first()
        )
        if not obj:
            raise NotFound("Capacitación no encontrada")
        return obj

    def _inscritos(self, db: Session, capacitacion_id: int) -> int:
        return (
            db.query(func.count(CapacitacionParticipante.id))
              .filter(CapacitacionParticipante.capacitacion_id == capacitacion_id)
              .scalar()
        ) or 0

    def _cambiar_estado(self, db: Session, obj: Capacitacion, nuevo: str, actor: ActorContext, extra=None):
        previo = obj.estado
        obj.estado = nuevo
        AuditSink(db).record(
            actor.id, AccionAuditoria.UPDATE, Capacitacion.__tablename__, obj.id,
            f"Capacitación {nuevo} ID: {obj.id}",
            {"estado": previo}, {"estado": nuevo, **(extra or {})},
        )
        db.commit()
        db.refresh(obj)
        log.info("[CAP] %s -> %s id=%s actor=%s", previo, nuevo, obj.id, actor.id)
        return obj

    # -------------------- Participantes --------------------
    def participantes(self, db: Session, capacitacion_id: int) -> list[CapacitacionParticipante]:
        self._get(db, capacitacion_id)
        return (
            db.query(CapacitacionParticipante)
              .options(selectinload(CapacitacionParticipante.usuario))
              .filter(CapacitacionParticipante.capacitacion_id == capacitacion_id)
              .order_by(CapacitacionParticipante.fecha_inscripcion.asc(), CapacitacionParticipante.id.asc())
              .all()
        )

    def inscribir(
        self, db: Session, capacitacion_id: int, payload: Mapping[str, Any],
        actor: ActorContext, now: datetime,
    ) -> CapacitacionParticipante:
        obj = self._get(db, capacitacion_id)
        data = validate(db, INSCRIBIR_RULES, payload)
        if obj.estado not in ("programada", "en_curso"):
            raise BusinessRuleError("Solo se puede inscribir en capacitaciones programadas o en curso")

        usuario_id = data["usuario_id"]
        ya = (
            db.query(CapacitacionParticipante.id)
              .filter(CapacitacionParticipante.capacitacion_id == obj.id,
                      CapacitacionParticipante.usuario_id == usuario_id)
              .first()
        )
        if ya:
            raise BusinessRuleError("El usuario ya está inscrito en esta capacitación")
        if obj.capacidad_maxima is not None and self._inscritos(db, obj.id) >= obj.capacidad_maxima:
            raise BusinessRuleError("La capacitación ha alcanzado su capacidad máxima")

        p = CapacitacionParticipante(capacitacion_id=obj.id, usuario_id=usuario_id, fecha_inscripcion=now)
        db.add(p)
        db.flush()
        AuditSink(db).record(
            actor.id, AccionAuditoria.CREATE, CapacitacionParticipante.__tablename__, p.id,
            f"Inscripción usuario {usuario_id} en capacitación ID: {obj.id}",
            None, {"capacitacion_id": obj.id, "usuario_id": usuario_id},
        )
        db.commit()
        db.refresh(p)
        log.info("[CAP] inscrito usuario=%s capacitacion=%s actor=%s", usuario_id, obj.id, actor.id)
        return p

    def desinscribir(self, db: Session, capacitacion_id: int, usuario_id: int, actor: ActorContext) -> None:
        obj = self._get(db, capacitacion_id)
        if obj.estado != "programada":
            raise BusinessRuleError("Solo se puede retirar participantes de capacitaciones programadas")
        p = (
            db.query(CapacitacionParticipante)
              .filter(CapacitacionParticipante.capacitacion_id == obj.id,
                      CapacitacionParticipante.usuario_id == usuario_id)
              .first()
        )
        if not p:
            raise NotFound("El usuario no está inscrito en esta capacitación")
        AuditSink(db).record(
            actor.id, AccionAuditoria.DELETE, CapacitacionParticipante.__tablename__, p.id,
            f"Retiro usuario {usuario_id} de capacitación ID: {obj.id}",
            {"capacitacion_id": obj.id, "usuario_id": usuario_id}, None,
        )
        db.delete(p)
        db.commit()

    # -------------------- Transiciones --------------------
    def iniciar(self, db: Session, capacitacion_id: int, actor: ActorContext) -> Capacitacion:
        obj = self._get(db, capacitacion_id)
        if obj.estado != "programada":
            raise BusinessRuleError("Solo se pueden iniciar capacitaciones programadas")
        return self._cambiar_estado(db, obj, "en_curso", actor)

    def cancelar(self, db: Session, capacitacion_id: int, actor: ActorContext) -> Capacitacion:
        obj = self._get(db, capacitacion_id)
        if obj.estado == "completada":
            raise BusinessRuleError("No se puede cancelar una capacitación completada")
        if obj.estado == "cancelada":
            raise BusinessRuleError("La capacitación ya está cancelada")
        return self._cambiar_estado(db, obj, "cancelada", actor)

    def finalizar(
        self, db: Session, capacitacion_id: int, payload: Mapping[str, Any], actor: ActorContext,
    ) -> Capacitacion:
        """
        Cierra la capacitación con la evaluación de los participantes:

            {"evaluaciones": [{"usuario_id": 3, "calificacion": 85, "asistio": true}],
             "observaciones_finales": "..."}

        Los errores de cada evaluación se informan como `evaluaciones.<i>.<campo>`.
        """
        obj = self._get(db, capacitacion_id)
        data = validate(db, FINALIZAR_RULES, payload)
        if obj.estado == "completada":
            raise BusinessRuleError("La capacitación ya está completada")
        if obj.estado == "cancelada":
            raise BusinessRuleError("No se puede finalizar una capacitación cancelada")

        evaluaciones = payload.get("evaluaciones") or []
        if not isinstance(evaluaciones, list):
            raise ValidationFailed({"evaluaciones": ["El campo evaluaciones debe ser una lista."]})

        inscritos = {
            p.usuario_id: p
            for p in db.query(CapacitacionParticipante)
                       .filter(CapacitacionParticipante.capacitacion_id == obj.id)
                       .all()
        }
        errors: dict[str, list[str]] = {}
        limpias = []
        for i, ev in enumerate(evaluaciones):
            clean, errs = run_rules(db, EVALUACION_RULES, ev if isinstance(ev, dict) else {})
            for campo, msgs in errs.items():
                errors[f"evaluaciones.{i}.{campo}"] = msgs
            if not errs and clean["usuario_id"] not in inscritos:
                errors[f"evaluaciones.{i}.usuario_id"] = ["El usuario no está inscrito en esta capacitación."]
            limpias.append(clean)
        if errors:
            raise ValidationFailed(errors)

        for ev in limpias:
            p = inscritos[ev["usuario_id"]]
            p.calificacion = ev["calificacion"]
            p.asistio = ev["asistio"]
            p.aprobado = ev["asistio"] and ev["calificacion"] >= NOTA_APROBACION
            if ev.get("observaciones") is not None:
                p.observaciones = ev["observaciones"]
        if data.get("observaciones_finales") is not None:
            obj.observaciones_finales = data["observaciones_finales"]

        return self._cambiar_estado(db, obj, "completada", actor, {"evaluados": len(limpias)})

    # -------------------- Consultas --------------------
    def programadas_query(self, db: Session, now: datetime):
        """Programadas que aún no empiezan, la más cercana primero."""
        return (
            db.query(Capacitacion)
              .options(selectinload(Capacitacion.instructor))
              .filter(Capacitacion.estado == "programada", Capacitacion.fecha_inicio >= now)
              .order_by(Capacitacion.fecha_inicio.asc(), Capacitacion.id.asc())
        )

    def estadisticas(self, db: Session, year: int) -> dict:
        C, P = Capacitacion, CapacitacionParticipante
        del_anio = extract("year", C.fecha_inicio) == year

        def contar(*criterios) -> int:
            return db.query(func.count(C.id)).filter(del_anio, *criterios).scalar() or 0

        def agrupar(col, claves) -> dict:
            rows = dict(db.query(col, func.count(C.id)).filter(del_anio).group_by(col).all())
            return {k: rows.get(k, 0) for k in claves}

        part = db.query(P).join(C, C.id == P.capacitacion_id).filter(del_anio)
        total_participantes = part.count()
        aprobados = part.filter(P.aprobado == True).count()  # noqa: E712
        promedio = (
            db.query(func.avg(P.calificacion))
              .join(C, C.id == P.capacitacion_id)
              .filter(del_anio, P.calificacion.isnot(None))
              .scalar()
        )
        por_mes = dict(
            db.query(extract("month", C.fecha_inicio), func.count(C.id))
              .filter(del_anio)
              .group_by(extract("month", C.fecha_inicio))
              .all()
        )
        no_canceladas = (del_anio, C.estado != "cancelada")
        costo = db.query(func.coalesce(func.sum(C.costo), 0)).filter(*no_canceladas).scalar()
        horas = db.query(func.coalesce(func.sum(C.duracion_horas), 0)).filter(*no_canceladas).scalar()

        return {
            "year": year,
            "total_capacitaciones": contar(),
            "capacitaciones_completadas": contar(C.estado == "completada"),
            "capacitaciones_programadas": contar(C.estado == "programada"),
            "total_participantes": total_participantes,
            "participantes_aprobados": aprobados,
            "por_tipo": agrupar(C.tipo, CAP_TIPOS),
            "por_modalidad": agrupar(C.modalidad, CAP_MODALIDADES),
            "por_mes": [{"mes": m, "total": por_mes.get(m, 0)} for m in range(1, 13)],
            "costo_total": float(costo or 0),
            "horas_totales": int(horas or 0),
            "promedio_calificacion": round(float(promedio), 2) if promedio is not None else 0,
        }
