# eva/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from eva.audit.context import current_request_meta
from eva.core.config import settings
from eva.core.envelope import fail
from eva.core.errors import AppError
from eva.db.session import init_db

log = logging.getLogger("uvicorn.error")

# ───────────────────────────────────────────────────────────────────────────────
# OpenAPI tags
# ───────────────────────────────────────────────────────────────────────────────
tags_metadata = [
    {"name": "Health", "description": "Endpoints de verificación."},
    {"name": "Auth", "description": "Autenticación y sesión."},
    {"name": "Dashboard", "description": "Indicadores y alertas."},
    {"name": "Servicios", "description": "Servicios hospitalarios."},
    {"name": "Áreas", "description": "Áreas por servicio."},
    {"name": "Propietarios", "description": "Propietarios de equipos."},
    {"name": "Equipos", "description": "Inventario de equipos biomédicos."},
    {"name": "Mantenimientos", "description": "Mantenimientos preventivos y correctivos."},
    {"name": "Calibraciones", "description": "Calibraciones de equipos."},
    {"name": "Contingencias", "description": "Fallas, incidentes y eventos adversos."},
    {"name": "Contactos", "description": "Proveedores y contactos técnicos."},
    {"name": "Repuestos", "description": "Inventario de repuestos y movimientos de stock."},
    {"name": "Capacitaciones", "description": "Capacitaciones del personal y su evaluación."},
    {"name": "Observaciones", "description": "Hallazgos técnicos sobre equipos y mantenimientos."},
    {"name": "Filtros", "description": "Opciones para selectores de filtro."},
    {"name": "Usuarios", "description": "Usuarios (escritura solo Administrador)."},
    {"name": "Roles", "description": "Roles (escritura solo Administrador)."},
    {"name": "Archivos", "description": "Manuales, certificados y documentos."},
    {"name": "Auditoría", "description": "Bitácora de cambios."},
    {"name": "Exportar", "description": "Exportación CSV."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info("[BOOT] EVA %s listo", settings.APP_VERSION)
    yield


# ───────────────────────────────────────────────────────────────────────────────
# App & Middlewares
# ───────────────────────────────────────────────────────────────────────────────
app = FastAPI(title="API EVA", version=settings.APP_VERSION, openapi_tags=tags_metadata, lifespan=lifespan)

# Respeta X-Forwarded-* si estás detrás de Nginx/ALB
app.add_middleware(ProxyHeadersMiddleware)

# CORS (incluye OPTIONS para preflight)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
    expose_headers=["Content-Disposition", "X-Request-ID", "X-Archivo-Id"],
)


@app.middleware("http")
async def attach_request_meta(request: Request, call_next):
    xff = request.headers.get("x-forwarded-for")
    ip = xff.split(",")[0].strip() if xff else (request.client.host if request.client else None)

    meta = {
        "ip": ip,
        "user_agent": request.headers.get("user-agent"),
        "method": request.method,
        "path": request.url.path,
        "request_id": str(uuid4()),
    }
    request.state.audit_meta = meta
    token = current_request_meta.set(meta)
    try:
        resp = await call_next(request)
    finally:
        current_request_meta.reset(token)
    resp.headers["X-Request-ID"] = meta["request_id"]
    return resp

# ───────────────────────────────────────────────────────────────────────────────
# Errores -> sobre {success, message, data, errors}
# ───────────────────────────────────────────────────────────────────────────────

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        log.error("[%s] %s %s: %s", exc.status_code, request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return fail(exc.message, exc.status_code, exc.errors, headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Error en la solicitud"
    if exc.status_code == 404 and message == "Not Found":
        message = "Ruta no encontrada"
    elif exc.status_code == 405:
        message = "Método no permitido"
    return fail(message, exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        campo = ".".join(loc) or "body"
        errors.setdefault(campo, []).append(err.get("msg", "Valor inválido"))
    log.warning("[422] %s %s: %s", request.method, request.url.path, errors)
    return fail("Error de validación", 422, errors)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.exception("[500] %s %s", request.method, request.url.path)
    errors = {"detail": str(exc)} if settings.EXPOSE_ERROR_DETAIL else None
    return fail("Error interno del servidor", 500, errors)

# ───────────────────────────────────────────────────────────────────────────────
# Routers (importa SOLO routers; no módulos/servicios)
# ───────────────────────────────────────────────────────────────────────────────
from eva.api.v1.health import router as health_router  # noqa: E402
from eva.api.v1.auth import router as auth_router  # noqa: E402
from eva.api.v1.dashboard import router as dashboard_router  # noqa: E402
from eva.api.v1.servicios import router as servicios_router  # noqa: E402
from eva.api.v1.areas import router as areas_router  # noqa: E402
from eva.api.v1.propietarios import router as propietarios_router  # noqa: E402
from eva.api.v1.equipos import router as equipos_router  # noqa: E402
from eva.api.v1.mantenimientos import router as mantenimientos_router  # noqa: E402
from eva.api.v1.calibraciones import router as calibraciones_router  # noqa: E402
from eva.api.v1.contingencias import router as contingencias_router  # noqa: E402
from eva.api.v1.contactos import router as contactos_router  # noqa: E402
from eva.api.v1.repuestos import router as repuestos_router  # noqa: E402
from eva.api.v1.capacitaciones import router as capacitaciones_router  # noqa: E402
from eva.api.v1.observaciones import router as observaciones_router  # noqa: E402
from eva.api.v1.filtros import router as filtros_router  # noqa: E402
from eva.api.v1.usuarios import router as usuarios_router  # noqa: E402
from eva.api.v1.roles import router as roles_router  # noqa: E402
from eva.api.v1.archivos import router as archivos_router  # noqa: E402
from eva.api.v1.auditoria import router as auditoria_router  # noqa: E402
from eva.api.v1.exportar import router as exportar_router  # noqa: E402

# Montaje
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(servicios_router)
app.include_router(areas_router)
app.include_router(propietarios_router)
app.include_router(equipos_router)
app.include_router(mantenimientos_router)
app.include_router(calibraciones_router)
app.include_router(contingencias_router)
app.include_router(contactos_router)
app.include_router(repuestos_router)
app.include_router(capacitaciones_router)
app.include_router(observaciones_router)
app.include_router(filtros_router)
app.include_router(usuarios_router)
app.include_router(roles_router)
app.include_router(archivos_router)
app.include_router(auditoria_router)
app.include_router(exportar_router)
