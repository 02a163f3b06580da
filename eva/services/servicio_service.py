from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from eva.db.models.area import Area
from eva.db.models.equipo import Equipo
from eva.db.models.servicio import Servicio
from eva.db.models.usuario import Usuario
from eva.schemas.servicios import ServicioJerarquia
from eva.services.resources import RIESGOS_CRITICOS


class ServicioService:
    def estadisticas(self, db: Session, servicio_id: int) -> dict:
        """
        Indicadores de un servicio:
        - total_areas / areas_activas
        - total_equipos, equipos_por_estado {activos, inactivos}, equipos_criticos
        - valor_total_equipos: suma de costo (NULL cuenta como 0)
        - total_usuarios
        """
        total_areas = db.query(func.count(Area.id)).filter(Area.servicio_id == servicio_id).scalar() or 0
        areas_activas = (
            db.query(func.count(Area.id))
              .filter(Area.servicio_id == servicio_id, Area.status == True)  # noqa: E712
              .scalar()
        ) or 0

        rows = (
            db.query(Equipo.status, func.count(Equipo.id))
              .filter(Equipo.servicio_id == servicio_id)
              .group_by(Equipo.status)
              .all()
        )
        por_estado = {"activos": 0, "inactivos": 0}
        for status, n in rows:
            por_estado["activos" if status else "inactivos"] += n

        valor = (
            db.query(func.coalesce(func.sum(Equipo.costo), 0))
              .filter(Equipo.servicio_id == servicio_id)
              .scalar()
        )
        criticos = (
            db.query(func.count(Equipo.id))
              .filter(Equipo.servicio_id == servicio_id, Equipo.riesgo.in_(RIESGOS_CRITICOS))
              .scalar()
        ) or 0
        total_usuarios = (
            db.query(func.count(Usuario.id)).filter(Usuario.servicio_id == servicio_id).scalar()
        ) or 0

        return {
            "total_areas": total_areas,
            "total_equipos": por_estado["activos"] + por_estado["inactivos"],
            "total_usuarios": total_usuarios,
            "equipos_por_estado": por_estado,
            "valor_total_equipos": float(valor or 0),
            "areas_activas": areas_activas,
            "equipos_criticos": criticos,
        }

    def jerarquia(self, db: Session) -> list[dict]:
        """Servicios activos con sus áreas (orden alfabético)."""
        servicios = (
            db.query(Servicio)
              .options(selectinload(Servicio.areas))
              .filter(Servicio.activo == True)  # noqa: E712
              .order_by(Servicio.name, Servicio.id)
              .all()
        )
        return [ServicioJerarquia.model_validate(s).model_dump(mode="json") for s in servicios]
