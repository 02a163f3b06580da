# eva/services/resource_store.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, Type

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from eva.audit.sink import AccionAuditoria, AuditSink, diff, snapshot
from eva.core.errors import NotFound, ReferentialConflict, StorageFailure
from eva.schemas.auth import ActorContext
from eva.services.query_builder import QueryBuilder
from eva.validation.rules import RuleSet, validate

log = logging.getLogger("uvicorn.error")

# Un guard devuelve el mensaje de conflicto o None si se puede eliminar
DeleteGuard = Callable[[Session, Any], "str | None"]
# Hook que ajusta los datos validados antes de guardar: (db, data, actor, obj|None) -> data
SaveHook = Callable[[Session, dict, "ActorContext | None", Any], dict]
# Hook previo al borrado (p.ej. desvincular históricos): (db, obj) -> None
DeleteHook = Callable[[Session, Any], None]

# Campos que nunca se actualizan desde el request
PROTECTED_FIELDS = {"id", "created_at", "updated_at"}


@dataclass
class ResourceSpec:
    """Configuración declarativa de un recurso CRUD."""

    name: str                      # slug de ruta: "servicios"
    model: Type
    label: str                     # "Servicio" (mensajes)
    plural: str                    # "Servicios"
    out_schema: Type[BaseModel]
    create_rules: RuleSet
    update_rules: RuleSet | None = None
    femenino: bool = False         # "Área creada" vs "Servicio creado"
    searchable: Sequence[str] = ()
    filterable: Mapping[str, str] | Sequence[str] = ()
    date_field: str | None = "created_at"
    sortable: Sequence[str] = ("created_at",)
    default_sort: tuple[str, str] = ("created_at", "desc")
    eager: Sequence[str] = ()
    status_field: str | None = None
    owner_field: str | None = None
    audit: bool = False
    delete_guards: Sequence[DeleteGuard] = ()
    before_save: Sequence[SaveHook] = ()
    before_delete: Sequence[DeleteHook] = ()
    write_roles: Sequence[str] = ()   # vacío = cualquier usuario autenticado

    @property
    def table(self) -> str:
        return self.model.__tablename__

    def builder(self) -> QueryBuilder:
        return QueryBuilder(
            self.model,
            searchable=self.searchable,
            filterable=self.filterable,
            date_field=self.date_field,
            sortable=self.sortable,
            default_sort=self.default_sort,
        )

    def msg(self, verbo: str) -> str:
        """msg('creado') -> 'Servicio creado exitosamente' / 'Área creada exitosamente'."""
        if self.femenino and verbo.endswith("o"):
            verbo = verbo[:-1] + "a"
        return f"{self.label} {verbo} exitosamente"

    def not_found(self) -> str:
        return f"{self.label} no encontrad{'a' if self.femenino else 'o'}"


class ResourceStore:
    """CRUD + listado genérico sobre un ResourceSpec. El actor se pasa explícito."""

    def __init__(self, db: Session, spec: ResourceSpec, actor: ActorContext | None = None):
        self.db = db
        self.spec = spec
        self.actor = actor
        self.audit = AuditSink(db)

    # -------------------- Helpers --------------------
    @property
    def actor_id(self) -> int | None:
        return self.actor.id if self.actor else None

    def base_query(self):
        M = self.spec.model
        q = self.db.query(M)
        for rel in self.spec.eager:
            q = q.options(selectinload(getattr(M, rel)))
        return q

    def serialize(self, obj) -> dict:
        return self.spec.out_schema.model_validate(obj).model_dump(mode="json")

    def _record(self, action: AccionAuditoria, obj, before=None, after=None, description: str = "") -> None:
        if not self.spec.audit:
            return
        self.audit.record(
            self.actor_id, action, self.spec.table, obj.id,
            description or f"{action.value} {self.spec.label} #{obj.id}",
            before, after,
        )

    # -------------------- Lectura --------------------
    def get(self, id: int):
        M = self.spec.model
        obj = self.base_query().filter(M.id == id).first()
        if not obj:
            raise NotFound(self.spec.not_found())
        return obj

    def list(self, params: Mapping[str, Any], query=None) -> dict:
        query = query if query is not None else self.base_query()
        return self.spec.builder().list(query, params, serializer=self.serialize)

    def active(self) -> list:
        if not self.spec.status_field:
            return []
        M = self.spec.model
        col = getattr(M, self.spec.status_field)
        sort_col = getattr(M, self.spec.searchable[0]) if self.spec.searchable else M.id
        return self.base_query().filter(col == True).order_by(sort_col.asc(), M.id.asc()).all()  # noqa: E712

    # -------------------- Escritura --------------------
    @contextmanager
    def _storage(self, op: str, record_id: Any = None):
        """Convierte fallos de BD en errores de dominio y deja log con contexto."""
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            log.warning("[STORE] integridad %s.%s id=%s actor=%s: %s",
                        self.spec.table, op, record_id, self.actor_id, e.orig)
            raise ReferentialConflict(
                f"No se pudo {op} el registro: existen registros relacionados o valores duplicados"
            )
        except SQLAlchemyError:
            self.db.rollback()
            log.exception("[STORE] fallo %s.%s id=%s actor=%s",
                          self.spec.table, op, record_id, self.actor_id)
            raise StorageFailure()

    def _run_save_hooks(self, data: dict, obj=None) -> dict:
        for hook in self.spec.before_save:
            data = hook(self.db, data, self.actor, obj)
        return data

    def create(self, fields: Mapping[str, Any]):
        spec = self.spec
        data = validate(self.db, spec.create_rules, fields, partial=False)
        data = self._run_save_hooks(data)

        owner = spec.owner_field
        if owner and self.actor and data.get(owner) is None:
            data[owner] = self.actor.id

        with self._storage("crear"):
            obj = spec.model(**data)
            self.db.add(obj)
            self.db.flush()
            self._record(AccionAuditoria.CREATE, obj, after=snapshot(obj),
                         description=f"Creación de {spec.label.lower()} ID: {obj.id}")
            self.db.commit()
            self.db.refresh(obj)
        log.info("[STORE] %s creado id=%s actor=%s", spec.table, obj.id, self.actor_id)
        return obj

    def update(self, id: int, partial: Mapping[str, Any]):
        spec = self.spec
        obj = self.get(id)
        rules = spec.update_rules if spec.update_rules is not None else spec.create_rules
        data = validate(self.db, rules, partial, partial=True, instance_id=obj.id)
        for k in PROTECTED_FIELDS | ({spec.owner_field} if spec.owner_field else set()):
            data.pop(k, None)
        data = self._run_save_hooks(data, obj)

        with self._storage("actualizar", id):
            before = snapshot(obj)
            for k, v in data.items():
                setattr(obj, k, v)
            self.db.flush()
            changed_before, changed_after = diff(before, snapshot(obj))
            if changed_after:
                self._record(AccionAuditoria.UPDATE, obj, changed_before, changed_after,
                             description=f"Actualización de {spec.label.lower()} ID: {obj.id}")
            self.db.commit()
            self.db.refresh(obj)
        return obj

    def delete(self, id: int) -> None:
        spec = self.spec
        obj = self.get(id)
        for guard in spec.delete_guards:
            message = guard(self.db, obj)
            if message:
                raise ReferentialConflict(message)

        with self._storage("eliminar", id):
            for hook in spec.before_delete:
                hook(self.db, obj)
            self._record(AccionAuditoria.DELETE, obj, before=snapshot(obj),
                         description=f"Eliminación de {spec.label.lower()} ID: {obj.id}")
            self.db.delete(obj)
            self.db.commit()
        log.info("[STORE] %s eliminado id=%s actor=%s", spec.table, id, self.actor_id)

    def toggle(self, id: int):
        """Invierte solo el campo de estado."""
        spec = self.spec
        obj = self.get(id)
        previo = bool(getattr(obj, spec.status_field))
        with self._storage("actualizar", id):
            setattr(obj, spec.status_field, not previo)
            self.db.flush()
            self._record(AccionAuditoria.UPDATE, obj,
                         {spec.status_field: previo}, {spec.status_field: not previo},
                         description=f"Cambio de estado de {spec.label.lower()} ID: {obj.id}")
            self.db.commit()
            self.db.refresh(obj)
        return obj
