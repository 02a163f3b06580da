# eva/api/v1/archivos.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import FileResponse

from eva.api.v1.resources import IdPath, Payload, ReaderDep, query_params
from eva.core.envelope import created, ok
from eva.dependencies.db import DbDep
from eva.services.archivo_service import ArchivoService

router = APIRouter(prefix="/api/archivos", tags=["Archivos"])
svc = ArchivoService()


@router.get("", summary="Listado paginado de archivos")
def list_archivos(request: Request, db: DbDep, actor: ReaderDep):
    return ok(svc.list(db, query_params(request)), "Archivos obtenidos exitosamente")


@router.get("/estadisticas", summary="Indicadores de archivos")
def estadisticas(db: DbDep, actor: ReaderDep):
    return ok(svc.estadisticas(db), "Estadísticas de archivos obtenidas")


@router.get("/por-equipo/{equipo_id}", summary="Archivos activos de un equipo")
def por_equipo(equipo_id: IdPath, db: DbDep, actor: ReaderDep):
    return ok([svc.serialize(a) for a in svc.por_equipo(db, equipo_id)],
              "Archivos del equipo obtenidos exitosamente")


@router.post("", status_code=201, summary="Subir archivo (multipart)")
def upload_archivo(
    db: DbDep,
    actor: ReaderDep,
    file: Optional[UploadFile] = File(default=None),
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    tipo: Optional[str] = Form(default=None),
    categoria: Optional[str] = Form(default=None),
    equipo_id: Optional[str] = Form(default=None),
    publico: Optional[str] = Form(default=None),
):
    fields = {
        k: v for k, v in {
            "name": name, "description": description, "tipo": tipo,
            "categoria": categoria, "equipo_id": equipo_id, "publico": publico,
        }.items() if v is not None
    }
    obj = svc.upload(db, fields, file, actor)
    resp = created(svc.serialize(obj), "Archivo subido exitosamente")
    resp.headers["X-Archivo-Id"] = str(obj.id)
    return resp


@router.get("/{archivo_id}/descargar", summary="Descargar archivo")
def descargar(archivo_id: IdPath, db: DbDep, actor: ReaderDep):
    path, obj = svc.prepare_download(db, archivo_id)
    return FileResponse(
        path,
        media_type=obj.mime_type or "application/octet-stream",
        filename=obj.file_name,
        headers={"X-Archivo-Id": str(obj.id)},
    )


@router.get("/{archivo_id}", summary="Detalle de archivo")
def get_archivo(archivo_id: IdPath, db: DbDep, actor: ReaderDep):
    return ok(svc.serialize(svc.get(db, archivo_id)), "Archivo obtenido exitosamente")


@router.put("/{archivo_id}", summary="Actualizar metadatos del archivo")
def update_archivo(archivo_id: IdPath, payload: Payload, db: DbDep, actor: ReaderDep):
    return ok(svc.serialize(svc.update(db, archivo_id, payload, actor)), "Archivo actualizado exitosamente")


@router.delete("/{archivo_id}", summary="Eliminar archivo (fila y archivo físico)")
def delete_archivo(archivo_id: IdPath, db: DbDep, actor: ReaderDep):
    svc.delete(db, archivo_id, actor)
    return ok(None, "Archivo eliminado exitosamente")
