"""
Exportación CSV de listados. Respeta los mismos filtros que el listado del
recurso (search, filtros, rango de fechas, orden), sin paginar.
"""
from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Callable, Iterator, Mapping, Sequence

from sqlalchemy.orm import Session, selectinload

from eva.services.resource_store import ResourceSpec
from eva.services.resources import CONTINGENCIAS, EQUIPOS, REPUESTOS

Column = tuple[str, Callable[[Any], Any]]
BOM = chr(0xFEFF)


def _rel(attr: str, field: str) -> Callable[[Any], Any]:
    def _get(obj):
        rel = getattr(obj, attr)
        return getattr(rel, field) if rel is not None else ""
    return _get


def _bool(attr: str) -> Callable[[Any], str]:
    return lambda o: "Sí" if getattr(o, attr) else "No"


def _attr(attr: str) -> Callable[[Any], Any]:
    return lambda o: getattr(o, attr)


EXPORTS: dict[str, tuple[ResourceSpec, Sequence[Column]]] = {
    "equipos": (EQUIPOS, (
        ("ID", _attr("id")),
        ("Código", _attr("code")),
        ("Nombre", _attr("name")),
        ("Marca", _attr("marca")),
        ("Modelo", _attr("modelo")),
        ("Serie", _attr("serial")),
        ("Servicio", _rel("servicio", "name")),
        ("Área", _rel("area", "name")),
        ("Propietario", _rel("propietario", "nombre")),
        ("Riesgo", _attr("riesgo")),
        ("Costo", _attr("costo")),
        ("Fecha adquisición", _attr("fecha_adquisicion")),
        ("Próximo mantenimiento", _attr("fecha_proximo_mantenimiento")),
        ("Activo", _bool("status")),
    )),
    "contingencias": (CONTINGENCIAS, (
        ("ID", _attr("id")),
        ("Fecha", _attr("fecha")),
        ("Equipo", _rel("equipo", "name")),
        ("Código equipo", _rel("equipo", "code")),
        ("Tipo", _attr("tipo")),
        ("Severidad", _attr("severidad")),
        ("Estado", _attr("estado")),
        ("Observación", _attr("observacion")),
        ("Solución", _attr("solucion")),
        ("Fecha cierre", _attr("fecha_cierre")),
    )),
    "repuestos": (REPUESTOS, (
        ("ID", _attr("id")),
        ("Código", _attr("codigo")),
        ("Nombre", _attr("nombre")),
        ("Categoría", _attr("categoria")),
        ("Marca", _attr("marca")),
        ("Stock actual", _attr("stock_actual")),
        ("Stock mínimo", _attr("stock_minimo")),
        ("Unidad", _attr("unidad_medida")),
        ("Precio unitario", _attr("precio_unitario")),
        ("Crítico", _bool("critico")),
        ("Estado", _attr("estado")),
    )),
}


def _fmt(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return value


def export_filename(recurso: str, now: datetime) -> str:
    return f"{recurso}_{now.strftime('%Y%m%d_%H%M%S')}.csv"


def _render(rows: Sequence[Any], columns: Sequence[Column]) -> Iterator[str]:
    """Genera el CSV línea a línea (con BOM para que Excel detecte UTF-8)."""
    buf = io.StringIO()
    writer = csv.writer(buf)

    def _flush() -> str:
        out = buf.getvalue()
        buf.seek(0)
        buf.truncate(0)
        return out

    writer.writerow([title for title, _ in columns])
    yield BOM + _flush()
    for obj in rows:
        writer.writerow([_fmt(get(obj)) for _, get in columns])
        yield _flush()


def export_rows(db: Session, recurso: str, params: Mapping[str, Any]) -> Iterator[str]:
    """
    Ejecuta la consulta antes de devolver el generador: la sesión puede cerrarse
    mientras la respuesta se transmite.
    """
    spec, columns = EXPORTS[recurso]
    M = spec.model
    qb = spec.builder()
    query = db.query(M)
    for rel in spec.eager:
        query = query.options(selectinload(getattr(M, rel)))
    rows = qb.order(qb.apply(query, params), params).all()
    return _render(rows, columns)
