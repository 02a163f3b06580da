# eva/core/envelope.py
from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def build_body(data: Any = None, message: str = "", status_code: int = 200, errors: Any = None) -> dict:
    """Cuerpo uniforme de respuesta. `success` depende solo del status."""
    return {
        "success": status_code < 400,
        "message": message,
        "data": jsonable_encoder(data),
        "errors": jsonable_encoder(errors) if errors is not None else None,
    }


def envelope(
    data: Any = None,
    message: str = "",
    status_code: int = 200,
    errors: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=build_body(data, message, status_code, errors),
        headers=headers,
    )


def ok(data: Any = None, message: str = "Operación exitosa") -> JSONResponse:
    return envelope(data, message, 200)


def created(data: Any = None, message: str = "Registro creado exitosamente") -> JSONResponse:
    return envelope(data, message, 201)


def fail(message: str, status_code: int = 400, errors: Any = None, headers: dict[str, str] | None = None) -> JSONResponse:
    return envelope(None, message, status_code, errors, headers)
