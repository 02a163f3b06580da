# eva/services/query_builder.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable, Mapping

from sqlalchemy import func, or_
from sqlalchemy.orm import Query

from eva.core.config import settings
from eva.validation.rules import parse_date

# Parámetros que nunca son filtros de columna
RESERVED = {"search", "page", "per_page", "order_by", "order_direction", "date_from", "date_to"}

_TRUE = {"1", "true", "si", "sí", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def params_from_request(multi_items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """
    Query-string -> dict. Claves repetidas o con sufijo [] se vuelven lista:
    ?servicios[]=1&servicios[]=2  |  ?servicios=1&servicios=2  ->  {"servicios": ["1", "2"]}
    """
    out: dict[str, Any] = {}
    for key, value in multi_items:
        is_list = key.endswith("[]")
        key = key[:-2] if is_list else key
        if key in out:
            prev = out[key]
            out[key] = (prev if isinstance(prev, list) else [prev]) + [value]
        else:
            out[key] = [value] if is_list else value
    return out


def enforce_per_page(per_page: Any, page: Any = 1) -> tuple[int, int]:
    """per_page acotado a [1, MAX_PER_PAGE] (default DEFAULT_PER_PAGE); page >= 1."""
    try:
        size = int(per_page) if per_page not in (None, "") else settings.DEFAULT_PER_PAGE
    except (TypeError, ValueError):
        size = settings.DEFAULT_PER_PAGE
    size = min(settings.MAX_PER_PAGE, max(1, size))
    try:
        page = max(1, int(page or 1))
    except (TypeError, ValueError):
        page = 1
    return page, size


def escape_like(term: str) -> str:
    """Escapa los comodines de LIKE para buscar el texto literal."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def safe_like(col, q: str):
    """LIKE case-insensitive y tolerante a NULL usando COALESCE + lower. % y _ se buscan literales."""
    like = f"%{escape_like((q or '').strip().lower())}%"
    return func.lower(func.coalesce(col, "")).like(like, escape="\\")


def _python_type(col) -> type | None:
    try:
        return col.type.python_type
    except NotImplementedError:
        return None


def _coerce(col, raw: Any) -> tuple[bool, Any]:
    """Convierte el texto del query-string al tipo de la columna. (ok, valor)."""
    if not isinstance(raw, str):
        return True, raw
    pt = _python_type(col)
    s = raw.strip()
    if pt is bool:
        if s.lower() in _TRUE:
            return True, True
        if s.lower() in _FALSE:
            return True, False
        return False, None
    if pt is int:
        try:
            return True, int(s)
        except ValueError:
            return False, None
    if pt in (date, datetime):
        parsed = parse_date(s)
        return parsed is not None, parsed
    return True, s


class QueryBuilder:
    """
    Traduce parámetros de request a predicados, orden y ventana de página.

    - search: OR de LIKE sobre `searchable`
    - filtro escalar -> igualdad; lista o "1,2,3" -> IN
    - date_from / date_to: rango inclusivo sobre `date_field`
    - order_by: solo columnas del safelist; lo desconocido cae al orden por defecto
    - parámetros no reconocidos se ignoran
    """

    def __init__(
        self,
        model,
        searchable: Iterable[str] = (),
        filterable: Mapping[str, str] | Iterable[str] = (),
        date_field: str | None = "created_at",
        sortable: Iterable[str] = (),
        default_sort: tuple[str, str] = ("created_at", "desc"),
    ):
        self.model = model
        self.searchable = [getattr(model, f) for f in searchable]
        if isinstance(filterable, Mapping):
            self.filterable = dict(filterable)
        else:
            self.filterable = {f: f for f in filterable}
        self.date_field = date_field
        self.sort_cols = {name: getattr(model, name) for name in {"id", *sortable, default_sort[0]}}
        self.default_sort = default_sort

    # -------------------- Filtros --------------------
    def apply(self, query: Query, params: Mapping[str, Any]) -> Query:
        M = self.model
        search = params.get("search")
        if isinstance(search, list):
            search = search[0] if search else None
        if search and str(search).strip() and self.searchable:
            query = query.filter(or_(*[safe_like(c, str(search)) for c in self.searchable]))

        for param, column in self.filterable.items():
            if param in RESERVED or param not in params:
                continue
            raw = params[param]
            if raw is None or raw == "" or raw == []:
                continue
            col = getattr(M, column)
            values = raw if isinstance(raw, list) else (raw.split(",") if isinstance(raw, str) and "," in raw else None)
            if values is not None:
                coerced = [v for ok, v in (_coerce(col, x) for x in values if str(x).strip() != "") if ok]
                if coerced:
                    query = query.filter(col.in_(coerced))
                continue
            ok, value = _coerce(col, raw)
            if ok:
                query = query.filter(col == value)

        if self.date_field:
            query = self.apply_date_range(query, params.get("date_from"), params.get("date_to"))
        return query

    def apply_date_range(self, query: Query, date_from: Any, date_to: Any) -> Query:
        col = getattr(self.model, self.date_field)
        is_datetime = _python_type(col) is datetime
        start = parse_date(date_from) if date_from else None
        end = parse_date(date_to) if date_to else None
        if start is not None:
            if is_datetime and not isinstance(start, datetime):
                start = datetime.combine(start, datetime.min.time())
            elif not is_datetime and isinstance(start, datetime):
                start = start.date()
            query = query.filter(col >= start)
        if end is not None:
            if is_datetime:
                if not isinstance(end, datetime):
                    # date_to incluye el día completo
                    end = datetime.combine(end, datetime.min.time()) + timedelta(days=1)
                    query = query.filter(col < end)
                else:
                    query = query.filter(col <= end)
            else:
                query = query.filter(col <= (end.date() if isinstance(end, datetime) else end))
        return query

    # -------------------- Orden seguro (whitelist) --------------------
    def order(self, query: Query, params: Mapping[str, Any]) -> Query:
        name = str(params.get("order_by") or "").strip()
        direction = str(params.get("order_direction") or "").strip().lower()
        if name not in self.sort_cols:
            name = self.default_sort[0]
        if direction not in ("asc", "desc"):
            direction = self.default_sort[1]
        col = self.sort_cols[name]
        tiebreak = self.model.id
        if direction == "desc":
            return query.order_by(col.desc(), tiebreak.desc())
        return query.order_by(col.asc(), tiebreak.asc())

    # -------------------- Paginación --------------------
    def paginate(
        self,
        query: Query,
        params: Mapping[str, Any],
        serializer: Callable[[Any], Any] | None = None,
    ) -> dict:
        page, per_page = enforce_per_page(params.get("per_page"), params.get("page"))
        total = query.order_by(None).count()
        items = self.order(query, params).offset((page - 1) * per_page).limit(per_page).all()
        last_page = max(1, (total + per_page - 1) // per_page)
        first = (page - 1) * per_page + 1 if items else None
        return {
            "data": [serializer(i) for i in items] if serializer else items,
            "total": total,
            "current_page": page,
            "last_page": last_page,
            "per_page": per_page,
            "from": first,
            "to": (first + len(items) - 1) if items else None,
        }

    def list(self, query: Query, params: Mapping[str, Any], serializer: Callable[[Any], Any] | None = None) -> dict:
        return self.paginate(self.apply(query, params), params, serializer)
