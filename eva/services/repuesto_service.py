from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from eva.audit.sink import AccionAuditoria, AuditSink
from eva.core.errors import BusinessRuleError, NotFound
from eva.db.models.repuesto import MovimientoRepuesto, Repuesto
from eva.schemas.auth import ActorContext
from eva.validation.rules import IsInteger, IsString, MaxLength, MinValue, Required, validate

log = logging.getLogger("uvicorn.error")

MOVIMIENTO_RULES = {
    "cantidad": [Required(), IsInteger(), MinValue(1)],
    "motivo": [Required(), IsString(), MaxLength(500)],
}


class RepuestoService:
    def bajo_stock_query(self, db: Session):
        return (
            db.query(Repuesto)
              .filter(Repuesto.estado == "activo", Repuesto.stock_actual <= Repuesto.stock_minimo)
              .order_by(Repuesto.critico.desc(), Repuesto.nombre, Repuesto.id)
        )

    def movimientos(self, db: Session, repuesto_id: int) -> list[MovimientoRepuesto]:
        if not db.get(Repuesto, repuesto_id):
            raise NotFound("Repuesto no encontrado")
        return (
            db.query(MovimientoRepuesto)
              .filter(MovimientoRepuesto.repuesto_id == repuesto_id)
              .order_by(MovimientoRepuesto.created_at.desc(), MovimientoRepuesto.id.desc())
              .all()
        )

    def movimiento(
        self, db: Session, repuesto_id: int, tipo: str, payload: Mapping[str, Any], actor: ActorContext,
    ) -> tuple[Repuesto, MovimientoRepuesto]:
        """
        Registra una entrada o salida de stock. La salida no puede dejar el
        stock negativo ("Stock insuficiente").
        """
        repuesto = db.get(Repuesto, repuesto_id)
        if not repuesto:
            raise NotFound("Repuesto no encontrado")
        data = validate(db, MOVIMIENTO_RULES, payload)
        cantidad = data["cantidad"]

        anterior = repuesto.stock_actual
        if tipo == "salida":
            if cantidad > anterior:
                raise BusinessRuleError(
                    "Stock insuficiente",
                    {"cantidad": [f"Stock disponible: {anterior}"]},
                )
            nuevo = anterior - cantidad
        else:
            nuevo = anterior + cantidad

        repuesto.stock_actual = nuevo
        mov = MovimientoRepuesto(
            repuesto_id=repuesto.id,
            tipo=tipo,
            cantidad=cantidad,
            stock_anterior=anterior,
            stock_nuevo=nuevo,
            motivo=data["motivo"],
            usuario_id=actor.id,
        )
        db.add(mov)
        db.flush()
        AuditSink(db).record(
            actor.id, AccionAuditoria.UPDATE, Repuesto.__tablename__, repuesto.id,
            f"{tipo.capitalize()} de stock repuesto ID: {repuesto.id}",
            {"stock_actual": anterior}, {"stock_actual": nuevo},
        )
        db.commit()
        db.refresh(repuesto)
        db.refresh(mov)
        log.info("[REPUESTO] %s id=%s cantidad=%s stock=%s->%s", tipo, repuesto.id, cantidad, anterior, nuevo)
        return repuesto, mov
