"""
Opciones para los selectores de filtro del frontend.

`opciones()` arma el combo general (servicios y áreas activas, catálogos de
equipos y mantenimientos, técnicos). `recurso()` describe lo que acepta el
listado de un recurso registrado: parámetros de filtro con sus valores posibles,
columnas de búsqueda y de orden.
"""
from __future__ import annotations

from sqlalchemy.orm import Session

from eva.core.errors import NotFound
from eva.core.security import TECNICO
from eva.db.models.area import Area
from eva.db.models.equipo import Equipo
from eva.db.models.rol import Rol
from eva.db.models.servicio import Servicio
from eva.db.models.usuario import Usuario
from eva.services.resource_store import ResourceSpec
from eva.services.resources import (
    MANT_ESTADOS, MANT_PRIORIDADES, MANT_TIPOS, REGISTRY, RIESGOS,
)
from eva.validation.rules import InChoices


def _choices(spec: ResourceSpec, column: str) -> list[str] | None:
    for rule in spec.create_rules.get(column, ()):
        if isinstance(rule, InChoices):
            return list(rule.choices)
    return None


class FiltroService:
    def opciones(self, db: Session) -> dict:
        servicios = (
            db.query(Servicio.id, Servicio.name)
              .filter(Servicio.activo == True)  # noqa: E712
              .order_by(Servicio.name.asc(), Servicio.id.asc())
              .all()
        )
        areas = (
            db.query(Area.id, Area.name, Area.servicio_id)
              .filter(Area.status == True)  # noqa: E712
              .order_by(Area.name.asc(), Area.id.asc())
              .all()
        )
        marcas = (
            db.query(Equipo.marca)
              .filter(Equipo.marca.isnot(None), Equipo.marca != "")
              .distinct()
              .order_by(Equipo.marca.asc())
              .all()
        )
        tecnicos = (
            db.query(Usuario.id, Usuario.nombre, Usuario.apellido)
              .join(Rol, Rol.id == Usuario.rol_id)
              .filter(Usuario.estado == True, Rol.nombre == TECNICO)  # noqa: E712
              .order_by(Usuario.nombre.asc(), Usuario.apellido.asc(), Usuario.id.asc())
              .all()
        )
        return {
            "servicios": [{"id": s.id, "name": s.name} for s in servicios],
            "areas": [{"id": a.id, "name": a.name, "servicio_id": a.servicio_id} for a in areas],
            "riesgos": list(RIESGOS),
            "marcas": [m.marca for m in marcas],
            "estados_mantenimiento": list(MANT_ESTADOS),
            "prioridades": list(MANT_PRIORIDADES),
            "tipos_mantenimiento": list(MANT_TIPOS),
            "tecnicos": [
                {"id": t.id, "nombre": f"{t.nombre} {t.apellido}"} for t in tecnicos
            ],
        }

    def recurso(self, name: str) -> dict:
        spec = REGISTRY.get(name)
        if spec is None:
            raise NotFound(f"Recurso '{name}' no encontrado")
        builder = spec.builder()
        return {
            "recurso": spec.name,
            "filtros": {
                param: _choices(spec, column) for param, column in builder.filterable.items()
            },
            "buscables": list(spec.searchable),
            "ordenables": sorted(builder.sort_cols),
            "orden_defecto": {"campo": spec.default_sort[0], "direccion": spec.default_sort[1]},
            "campo_fecha": spec.date_field,
        }

    def recursos(self) -> list[str]:
        return sorted(REGISTRY)
