# eva/services/archivo_service.py
from __future__ import annotations

import logging
import mimetypes
import os
import re
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from eva.audit.sink import AccionAuditoria, AuditSink, diff, snapshot
from eva.core.config import settings
from eva.core.errors import BusinessRuleError, NotFound, StorageFailure, ValidationFailed
from eva.db.models.archivo import Archivo
from eva.db.models.equipo import Equipo
from eva.schemas.archivos import ArchivoOut, format_file_size
from eva.schemas.auth import ActorContext
from eva.services.query_builder import QueryBuilder
from eva.validation.rules import (
    Exists, InChoices, IsBoolean, IsInteger, IsString, MaxLength, Nullable, Required, validate,
)

log = logging.getLogger("uvicorn.error")

# ─────────────────────────────────────────────────────────────────────────────
# Config
# ─────────────────────────────────────────────────────────────────────────────
ALLOWED_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "manual": ("pdf", "doc", "docx"),
    "imagen": ("jpg", "jpeg", "png", "gif", "bmp"),
    "documento": ("pdf", "doc", "docx", "xls", "xlsx", "txt"),
    "certificado": ("pdf",),
    "reporte": ("pdf", "doc", "docx", "xls", "xlsx"),
    "otro": ("pdf", "doc", "docx", "xls", "xlsx", "jpg", "jpeg", "png", "gif", "txt", "zip", "rar"),
}
TIPOS = tuple(ALLOWED_EXTENSIONS)
CHUNK_SIZE = 1024 * 1024

UPLOAD_RULES = {
    "name": [Required(), IsString(), MaxLength(255)],
    "description": [Nullable(), IsString()],
    "tipo": [Required(), InChoices(*TIPOS)],
    "categoria": [Nullable(), IsString(), MaxLength(100)],
    "equipo_id": [Nullable(), IsInteger(), Exists(Equipo)],
    "publico": [Nullable(), IsBoolean()],
}
# El tipo define la carpeta física: no se cambia después de subir
UPDATE_RULES = {
    "name": [Required(), IsString(), MaxLength(255)],
    "description": [Nullable(), IsString()],
    "categoria": [Nullable(), IsString(), MaxLength(100)],
    "equipo_id": [Nullable(), IsInteger(), Exists(Equipo)],
    "publico": [IsBoolean()],
    "activo": [IsBoolean()],
}

builder = QueryBuilder(
    Archivo,
    searchable=("name", "description", "file_name", "categoria"),
    filterable=("tipo", "categoria", "extension", "equipo_id", "publico", "activo"),
    sortable=("name", "file_size", "descargas", "created_at"),
)

# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────
_slug_re = re.compile(r"[^a-zA-Z0-9._-]+")


def _slugify_filename(name: str) -> str:
    # quita rutas y deja un nombre "seguro" para Content-Disposition
    base = os.path.basename(name or "archivo").strip().replace(" ", "_")
    return _slug_re.sub("", base) or "archivo"


def _files_root() -> Path:
    return Path(settings.FILES_DIR)


def absolute_path(archivo: Archivo) -> Path:
    return _files_root() / archivo.file_path


def _write_upload(up: UploadFile, destino: Path) -> int:
    """Copia el upload por bloques; corta si supera MAX_UPLOAD_MB."""
    limite = settings.MAX_UPLOAD_MB * 1024 * 1024
    destino.parent.mkdir(parents=True, exist_ok=True)
    total = 0
    up.file.seek(0)
    try:
        with open(destino, "wb") as f:
            while True:
                chunk = up.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > limite:
                    raise ValidationFailed({"file": [f"El archivo supera los {settings.MAX_UPLOAD_MB} MB."]})
                f.write(chunk)
    except ValidationFailed:
        destino.unlink(missing_ok=True)
        raise
    return total


def _serialize(obj: Archivo) -> dict:
    return ArchivoOut.model_validate(obj).model_dump(mode="json")

# ─────────────────────────────────────────────────────────────────────────────
# Service
# ─────────────────────────────────────────────────────────────────────────────
class ArchivoService:
    serialize = staticmethod(_serialize)

    def _query(self, db: Session):
        return db.query(Archivo).options(selectinload(Archivo.equipo))

    def list(self, db: Session, params: Mapping[str, Any]) -> dict:
        return builder.list(self._query(db), params, serializer=_serialize)

    def get(self, db: Session, archivo_id: int) -> Archivo:
        obj = self._query(db).filter(Archivo.id == archivo_id).first()
        if not obj:
            raise NotFound("Archivo no encontrado")
        return obj

    def por_equipo(self, db: Session, equipo_id: int) -> list[Archivo]:
        return (
            self._query(db)
              .filter(Archivo.equipo_id == equipo_id, Archivo.activo == True)  # noqa: E712
              .order_by(Archivo.created_at.desc(), Archivo.id.desc())
              .all()
        )

    def upload(self, db: Session, fields: Mapping[str, Any], up: UploadFile | None, actor: ActorContext) -> Archivo:
        data = validate(db, UPLOAD_RULES, fields)
        if up is None or not up.filename:
            raise ValidationFailed({"file": ["El campo file es obligatorio."]})

        original_name = _slugify_filename(up.filename)
        ext = os.path.splitext(original_name)[1].lstrip(".").lower()
        tipo = data["tipo"]
        permitidas = ALLOWED_EXTENSIONS[tipo]
        if ext not in permitidas:
            raise BusinessRuleError(
                f"Tipo de archivo no permitido para la categoría '{tipo}'. "
                f"Extensiones permitidas: {', '.join(permitidas)}"
            )

        relativo = Path("archivos") / tipo / f"{uuid4()}.{ext}"
        destino = _files_root() / relativo
        size = _write_upload(up, destino)

        try:
            obj = Archivo(
                name=data["name"],
                description=data.get("description"),
                file_name=original_name,
                file_path=relativo.as_posix(),
                file_size=size,
                extension=ext,
                mime_type=up.content_type or mimetypes.guess_type(original_name)[0],
                tipo=tipo,
                categoria=data.get("categoria"),
                equipo_id=data.get("equipo_id"),
                usuario_id=actor.id,
                publico=bool(data.get("publico") or False),
            )
            db.add(obj)
            db.flush()
            AuditSink(db).record(
                actor.id, AccionAuditoria.CREATE, Archivo.__tablename__, obj.id,
                f"Subida de archivo ID: {obj.id}", after=snapshot(obj),
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            destino.unlink(missing_ok=True)  # no dejar huérfano el archivo físico
            log.exception("[ARCHIVOS] fallo al registrar %s actor=%s", relativo, actor.id)
            raise StorageFailure()

        log.info("[ARCHIVOS] subido id=%s path=%s size=%s", obj.id, obj.file_path, size)
        return self.get(db, obj.id)

    def update(self, db: Session, archivo_id: int, fields: Mapping[str, Any], actor: ActorContext) -> Archivo:
        obj = self.get(db, archivo_id)
        data = validate(db, UPDATE_RULES, fields, partial=True, instance_id=obj.id)
        before = snapshot(obj)
        for k, v in data.items():
            setattr(obj, k, v)
        db.flush()
        changed_before, changed_after = diff(before, snapshot(obj))
        if changed_after:
            AuditSink(db).record(
                actor.id, AccionAuditoria.UPDATE, Archivo.__tablename__, obj.id,
                f"Actualización de archivo ID: {obj.id}", changed_before, changed_after,
            )
        db.commit()
        return self.get(db, obj.id)

    def delete(self, db: Session, archivo_id: int, actor: ActorContext) -> None:
        obj = self.get(db, archivo_id)
        path = absolute_path(obj)
        AuditSink(db).record(
            actor.id, AccionAuditoria.DELETE, Archivo.__tablename__, obj.id,
            f"Eliminación de archivo ID: {obj.id}", before=snapshot(obj),
        )
        db.delete(obj)
        db.commit()
        if path.exists():
            path.unlink()
        else:
            log.warning("[ARCHIVOS] archivo físico ausente al eliminar id=%s path=%s", archivo_id, path)

    def prepare_download(self, db: Session, archivo_id: int) -> tuple[Path, Archivo]:
        """Valida que exista el archivo físico y suma una descarga."""
        obj = self.get(db, archivo_id)
        path = absolute_path(obj)
        if not path.is_file():
            raise NotFound("El archivo físico no existe")
        obj.descargas = (obj.descargas or 0) + 1
        db.commit()
        return path, obj

    def estadisticas(self, db: Session) -> dict:
        activos = Archivo.activo == True  # noqa: E712
        total_bytes = db.query(func.coalesce(func.sum(Archivo.file_size), 0)).filter(activos).scalar() or 0

        def _count(*criterios) -> int:
            return db.query(func.count(Archivo.id)).filter(activos, *criterios).scalar() or 0

        por_tipo = [
            {"tipo": t, "total": n}
            for t, n in db.query(Archivo.tipo, func.count(Archivo.id)).filter(activos).group_by(Archivo.tipo).all()
        ]
        n_ext = func.count(Archivo.id).label("total")
        por_extension = [
            {"extension": e, "total": n}
            for e, n in (
                db.query(Archivo.extension, n_ext).filter(activos)
                  .group_by(Archivo.extension).order_by(n_ext.desc()).all()
            )
        ]
        mas_descargados = (
            db.query(Archivo).filter(activos)
              .order_by(Archivo.descargas.desc(), Archivo.id).limit(10).all()
        )
        return {
            "total_archivos": _count(),
            "por_tipo": por_tipo,
            "por_extension": por_extension,
            "tamaño_total": format_file_size(total_bytes),
            "tamaño_total_bytes": int(total_bytes),
            "archivos_publicos": _count(Archivo.publico == True),  # noqa: E712
            "archivos_privados": _count(Archivo.publico == False),  # noqa: E712
            "total_descargas": int(
                db.query(func.coalesce(func.sum(Archivo.descargas), 0)).filter(activos).scalar() or 0
            ),
            "archivos_mas_descargados": [
                {"id": a.id, "name": a.name, "tipo": a.tipo, "descargas": a.descargas} for a in mas_descargados
            ],
        }
