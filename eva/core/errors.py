# eva/core/errors.py
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Error de dominio que el handler global convierte en sobre {success, message, data, errors}."""

    status_code: int = 500
    default_message: str = "Error interno del servidor"

    def __init__(self, message: str | None = None, errors: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = 422
    default_message = "Error de validación"

    def __init__(self, errors: dict[str, list[str]], message: str | None = None):
        super().__init__(message, errors)


class NotFound(AppError):
    status_code = 404
    default_message = "Recurso no encontrado"


class ReferentialConflict(AppError):
    status_code = 400
    default_message = "No se puede eliminar el registro porque tiene registros asociados"


class BusinessRuleError(AppError):
    status_code = 400
    default_message = "Operación no permitida"


class Unauthorized(AppError):
    status_code = 401
    default_message = "No autorizado"


class Forbidden(AppError):
    status_code = 403
    default_message = "Acceso denegado"


class StorageFailure(AppError):
    status_code = 500
    default_message = "Error interno del servidor"
