# eva/audit/sink.py
from __future__ import annotations

import enum
import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from eva.audit.context import current_request_meta
from eva.db.models.auditoria import AuditoriaLog

log = logging.getLogger(__name__)

# Nunca se guardan en la bitácora
SENSITIVE_KEYS = {"password", "pass", "contrasena", "contraseña", "token", "secret"}


class AccionAuditoria(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    VIEW = "VIEW"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


def _to_json_safe(value: Any) -> Any:
    if value is None:
        return None
    enc = jsonable_encoder(value)
    if isinstance(enc, dict):
        return {k: ("***" if k.lower() in SENSITIVE_KEYS else v) for k, v in enc.items()}
    return enc


def snapshot(obj) -> dict[str, Any]:
    """Columnas mapeadas de una instancia (para datos_anteriores / datos_nuevos)."""
    state = inspect(obj)
    return {attr.key: getattr(obj, attr.key) for attr in state.mapper.column_attrs}


def diff(before: dict[str, Any], after: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Reduce dos snapshots a solo los campos que cambiaron."""
    changed = [k for k in after if before.get(k) != after.get(k) and k != "updated_at"]
    return {k: before.get(k) for k in changed}, {k: after.get(k) for k in changed}


class AuditSink:
    """Agrega entradas a la bitácora dentro de la transacción del llamador."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        actor_id: int | None,
        action: AccionAuditoria | str,
        table: str | None,
        record_id: int | None = None,
        description: str = "",
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> AuditoriaLog:
        meta = current_request_meta.get({}) or {}
        accion = action.value if isinstance(action, AccionAuditoria) else str(action).upper()
        entry = AuditoriaLog(
            usuario_id=actor_id,
            accion=accion,
            tabla=table,
            registro_id=record_id,
            descripcion=description,
            datos_anteriores=_to_json_safe(before),
            datos_nuevos=_to_json_safe(after),
            ip_address=meta.get("ip"),
            user_agent=(meta.get("user_agent") or "")[:512] or None,
        )
        self.db.add(entry)
        self.db.flush()
        log.debug("[AUDIT] %s %s#%s por usuario=%s", accion, table, record_id, actor_id)
        return entry
