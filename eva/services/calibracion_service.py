from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session, selectinload

from eva.db.models.calibracion import Calibracion


class CalibracionService:
    def vencidas_query(self, db: Session, today: date):
        """fecha_vencimiento anterior a hoy; las 'no_aplica' no vencen."""
        return (
            db.query(Calibracion)
              .options(selectinload(Calibracion.equipo))
              .filter(Calibracion.fecha_vencimiento < today, Calibracion.estado != "no_aplica")
        )
