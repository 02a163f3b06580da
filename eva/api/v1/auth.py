# eva/api/v1/auth.py
import json
from typing import Tuple

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from eva.api.v1.resources import ReaderDep
from eva.core.envelope import ok
from eva.core.errors import ValidationFailed
from eva.dependencies.db import DbDep
from eva.schemas.auth import LoginRequest
from eva.schemas.usuarios import UsuarioOut
from eva.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])
svc = AuthService()


async def extract_credentials(request: Request) -> Tuple[str, str]:
    """Acepta JSON o form (x-www-form-urlencoded / multipart)."""
    ctype = (request.headers.get("content-type") or "").lower()
    raw: dict = {}
    if "form" in ctype:
        form = await request.form()
        raw = {k: form.get(k) for k in ("username", "password")}
    else:
        body = await request.body()
        if body:
            try:
                parsed = json.loads(body)
            except ValueError:
                raise ValidationFailed({"body": ["El cuerpo debe ser JSON válido."]})
            raw = parsed if isinstance(parsed, dict) else {}

    try:
        creds = LoginRequest.model_validate(raw)
    except ValidationError as e:
        errors: dict[str, list[str]] = {}
        for err in e.errors():
            campo = str(err["loc"][0]) if err.get("loc") else "body"
            errors.setdefault(campo, []).append(f"El campo {campo} es obligatorio.")
        raise ValidationFailed(errors)
    if not creds.username.strip() or not creds.password:
        raise ValidationFailed({"username": ["Usuario y contraseña son obligatorios."]})
    return creds.username, creds.password


@router.post("/login", summary="Iniciar sesión (username o email)")
def login(db: DbDep, creds: Tuple[str, str] = Depends(extract_credentials)):
    username, password = creds
    result = svc.login(db, username, password)
    return ok(result.model_dump(mode="json"), "Login exitoso")


@router.post("/logout", summary="Cerrar sesión (revoca el token actual)")
def logout(db: DbDep, actor: ReaderDep):
    svc.logout(db, actor)
    return ok(None, "Sesión cerrada exitosamente")


@router.get("/me", summary="Usuario autenticado")
def me(db: DbDep, actor: ReaderDep):
    user = svc.me(db, actor)
    return ok(UsuarioOut.model_validate(user).model_dump(mode="json"), "Usuario obtenido exitosamente")
