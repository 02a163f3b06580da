from __future__ import annotations

from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from eva.db.models.equipo import Equipo
from eva.db.models.servicio import Servicio
from eva.services.resources import RIESGOS, RIESGOS_CRITICOS


class EquipoService:
    def criticos_query(self, db: Session):
        """Equipos activos con riesgo IIB/III."""
        return (
            db.query(Equipo)
              .filter(Equipo.status == True, Equipo.riesgo.in_(RIESGOS_CRITICOS))  # noqa: E712
        )

    def estadisticas(self, db: Session, today: date) -> dict:
        total = db.query(func.count(Equipo.id)).scalar() or 0
        activos = db.query(func.count(Equipo.id)).filter(Equipo.status == True).scalar() or 0  # noqa: E712

        por_riesgo = {r: 0 for r in RIESGOS}
        por_riesgo["sin_clasificar"] = 0
        for riesgo, n in db.query(Equipo.riesgo, func.count(Equipo.id)).group_by(Equipo.riesgo).all():
            por_riesgo[riesgo if riesgo in por_riesgo else "sin_clasificar"] += n

        por_servicio = [
            {"servicio_id": sid, "servicio": name or "Sin servicio", "total": n}
            for sid, name, n in (
                db.query(Equipo.servicio_id, Servicio.name, func.count(Equipo.id))
                  .outerjoin(Servicio, Servicio.id == Equipo.servicio_id)
                  .group_by(Equipo.servicio_id, Servicio.name)
                  .order_by(func.count(Equipo.id).desc())
                  .all()
            )
        ]

        valor = db.query(func.coalesce(func.sum(Equipo.costo), 0)).scalar()
        mant_vencido = (
            db.query(func.count(Equipo.id))
              .filter(Equipo.status == True, Equipo.fecha_proximo_mantenimiento < today)  # noqa: E712
              .scalar()
        ) or 0

        return {
            "total": total,
            "activos": activos,
            "inactivos": total - activos,
            "criticos": self.criticos_query(db).count(),
            "por_riesgo": por_riesgo,
            "por_servicio": por_servicio,
            "valor_total": float(valor or 0),
            "con_mantenimiento_vencido": mant_vencido,
        }
