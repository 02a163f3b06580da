# eva/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param
from jose import jwt, JWTError, ExpiredSignatureError
from sqlalchemy.orm import Session

from eva.core.config import settings
from eva.core.errors import Forbidden
from eva.dependencies.db import DbDep
from eva.db.models.sesion_token import SesionToken
from eva.db.models.usuario import Usuario
from eva.schemas.auth import ActorContext

ADMIN = "Administrador"
TECNICO = "Tecnico"


# ───────────────────────────────────────────────────────────────────────────────
# JWT helpers
# ───────────────────────────────────────────────────────────────────────────────

def create_access_token(
    sub: str,
    roles: list[str],
    jti: str,
    expires_minutes: int | None = None,
) -> tuple[str, datetime]:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": sub,
        "roles": roles,
        "jti": jti,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM), exp


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def issue_session_token(db: Session, user: Usuario) -> tuple[str, int]:
    """Emite un JWT y registra su sesión (un token por sesión). Devuelve (token, expires_in)."""
    jti = uuid4().hex
    rol = user.rol.nombre if user.rol else None
    token, exp = create_access_token(str(user.id), [rol] if rol else [], jti)
    db.add(SesionToken(
        usuario_id=user.id,
        jti=jti,
        expira=exp.replace(tzinfo=None),
    ))
    return token, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def revoke_session(db: Session, jti: str | None) -> bool:
    if not jti:
        return False
    ses = db.query(SesionToken).filter(SesionToken.jti == jti).first()
    if not ses or ses.revocado:
        return False
    ses.revocado = True
    return True

# ───────────────────────────────────────────────────────────────────────────────
# Bearer extractor con errores detallados
# ───────────────────────────────────────────────────────────────────────────────

def _raise_401(msg: str, err: str | None = None, desc: str | None = None) -> None:
    hdr = 'Bearer'
    if err:
        if desc:
            hdr = f'Bearer error="{err}", error_description="{desc}"'
        else:
            hdr = f'Bearer error="{err}"'
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=msg,
        headers={"WWW-Authenticate": hdr},
    )


def bearer_token_required(request: Request) -> str:
    """
    Extrae y valida el esquema Bearer. Lanza 401 con motivo claro si falta.
    """
    authorization: str | None = request.headers.get("authorization")
    scheme, param = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "bearer" or not param:
        _raise_401(
            "Token de acceso requerido",
            "invalid_request",
            "Header Authorization: Bearer <token> es requerido",
        )
    return param.strip()

# ───────────────────────────────────────────────────────────────────────────────
# Actor actual / Roles
# ───────────────────────────────────────────────────────────────────────────────

def get_current_actor(token: Annotated[str, Depends(bearer_token_required)], db: DbDep) -> ActorContext:
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        _raise_401("Token expirado", "invalid_token", "El claim 'exp' ya caducó")
    except JWTError:
        _raise_401("Token inválido", "invalid_token", "No se pudo verificar el token")

    sub = payload.get("sub")
    jti = payload.get("jti")
    if not sub or not jti:
        _raise_401("Token inválido", "invalid_token", "El token no contiene 'sub' o 'jti'")

    ses = db.query(SesionToken).filter(SesionToken.jti == jti).first()
    if not ses or ses.revocado:
        _raise_401("Sesión cerrada", "invalid_token", "El token fue revocado")

    user = db.get(Usuario, int(sub))
    if not user:
        _raise_401("Usuario no encontrado", "invalid_token", "El 'sub' del token no corresponde a un usuario válido")
    if not user.estado:
        _raise_401("Usuario inactivo", "invalid_token")

    return ActorContext(
        id=user.id,
        username=user.username,
        email=user.email,
        nombre=user.nombre,
        apellido=user.apellido,
        rol=user.rol.nombre if user.rol else None,
        servicio_id=user.servicio_id,
        jti=jti,
    )


ActorDep = Annotated[ActorContext, Depends(get_current_actor)]


def require_roles(*required: str):
    """
    - '*'  => solo autenticado (sin chequear rol)
    - Si se pasan roles, compara sin distinguir mayúsculas
    """
    if len(required) == 1 and required[0] == "*":
        def _dep_any(actor: ActorDep) -> ActorContext:
            return actor
        return _dep_any

    required_norm = {r.strip().upper() for r in required if r}

    def _dep(actor: ActorDep) -> ActorContext:
        if (actor.rol or "").strip().upper() not in required_norm:
            raise Forbidden("Rol insuficiente para esta operación")
        return actor

    return _dep

# ───────────────────────────────────────────────────────────────────────────────
# Password helpers (bcrypt)
# ───────────────────────────────────────────────────────────────────────────────

_pwd_ctx = None  # CryptContext perezoso


def _ctx():
    global _pwd_ctx
    if _pwd_ctx is None:
        from passlib.context import CryptContext
        _pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")
    return _pwd_ctx


def verify_password(plain_password: str, stored_hash: str | None) -> bool:
    if not stored_hash:
        return False
    return _ctx().verify(plain_password, stored_hash)


def hash_password(plain_password: str) -> str:
    return _ctx().hash(plain_password)
