# eva/api/v1/health.py
from __future__ import annotations

import logging
import platform
import resource
import shutil
import time
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from eva.core.config import settings
from eva.core.envelope import ok
from eva.dependencies.context import CacheDep
from eva.dependencies.db import DbDep

log = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api", tags=["Health"])

_STARTED = time.monotonic()
_HEALTH_KEY = "health_check_ping"


def _memory() -> dict:
    # ru_maxrss viene en KB en Linux
    peak_kb = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    return {"peak_mb": round(peak_kb / 1024, 2)}


def _disk() -> dict:
    target = Path(settings.FILES_DIR)
    usage = shutil.disk_usage(target if target.exists() else Path("."))
    return {
        "total_gb": round(usage.total / 1024 ** 3, 2),
        "free_gb": round(usage.free / 1024 ** 3, 2),
        "used_percent": round(usage.used / usage.total * 100, 1) if usage.total else 0,
    }


def _check_db(db) -> dict:
    t0 = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "response_time_ms": round((time.perf_counter() - t0) * 1000, 2)}
    except SQLAlchemyError as e:
        log.error("[HEALTH] base de datos no disponible: %s", e)
        return {"status": "error", "message": "Base de datos no disponible"}


def _check_cache(cache) -> dict:
    cache.put(_HEALTH_KEY, "ok", 10)
    value = cache.get(_HEALTH_KEY)
    cache.forget(_HEALTH_KEY)
    return {"status": "ok" if value == "ok" else "error", "backend": "in-memory"}


@router.get("/health", summary="Health check básico")
def health():
    return ok(
        {
            "status": "ok",
            "message": "Sistema EVA funcionando correctamente",
            "timestamp": datetime.now().isoformat(),
            "version": settings.APP_VERSION,
        },
        "Sistema EVA funcionando correctamente",
    )


@router.get("/health/advanced", summary="Health check con base de datos, caché, memoria y disco")
def health_advanced(db: DbDep, cache: CacheDep):
    t0 = time.perf_counter()
    checks = {
        "database": _check_db(db),
        "cache": _check_cache(cache),
        "memory": _memory(),
        "disk": _disk(),
    }
    degraded = any(c.get("status") == "error" for c in checks.values())
    return ok(
        {
            "status": "degraded" if degraded else "ok",
            "timestamp": datetime.now().isoformat(),
            "response_time_ms": round((time.perf_counter() - t0) * 1000, 2),
            "checks": checks,
            "system_info": {
                "python_version": platform.python_version(),
                "app_version": settings.APP_VERSION,
                "platform": platform.system(),
            },
        },
        "Health check avanzado completado",
    )


@router.get("/monitor", summary="Métricas de proceso")
def monitor(db: DbDep, cache: CacheDep):
    pool = db.get_bind().pool
    checked_out = getattr(pool, "checkedout", None)
    return ok(
        {
            "timestamp": datetime.now().isoformat(),
            "uptime_seconds": round(time.monotonic() - _STARTED, 1),
            "performance": {"memory_usage": _memory(), "disk_usage": _disk()},
            "database": {
                "pool": pool.__class__.__name__,
                "active_connections": checked_out() if callable(checked_out) else None,
            },
            "cache": cache.stats(),
        },
        "Monitoreo en tiempo real",
    )
