# eva/services/auth_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from eva.audit.sink import AccionAuditoria, AuditSink
from eva.core.errors import NotFound, Unauthorized
from eva.core.security import issue_session_token, revoke_session, verify_password
from eva.db.models.usuario import Usuario
from eva.schemas.auth import ActorContext, TokenResponse, UsuarioPublic

log = logging.getLogger("uvicorn.error")


# =============== Utilidades ===============

def find_user_by_username_or_email(db: Session, identifier: str) -> Optional[Usuario]:
    ident = (identifier or "").strip().lower()
    if not ident:
        return None
    return (
        db.query(Usuario)
        .filter(or_(func.lower(Usuario.username) == ident, func.lower(Usuario.email) == ident))
        .first()
    )


# =============== Servicio ===============

class AuthService:
    def login(self, db: Session, identifier: str, password: str) -> TokenResponse:
        user = find_user_by_username_or_email(db, identifier)
        if not user or not verify_password(password, user.password):
            log.warning("[AUTH] login fallido username=%s", identifier)
            raise Unauthorized("Credenciales incorrectas")
        if not user.estado:
            log.warning("[AUTH] login de usuario inactivo id=%s", user.id)
            raise Unauthorized("Usuario inactivo")

        token, expires_in = issue_session_token(db, user)
        user.ultimo_acceso = datetime.now()
        AuditSink(db).record(
            user.id, AccionAuditoria.LOGIN, Usuario.__tablename__, user.id,
            f"Inicio de sesión de {user.username}",
        )
        db.commit()
        log.info("[AUTH] login ok id=%s", user.id)
        return TokenResponse(
            user=UsuarioPublic.model_validate(user),
            token=token,
            expires_in=expires_in,
        )

    def logout(self, db: Session, actor: ActorContext) -> None:
        revoke_session(db, actor.jti)
        AuditSink(db).record(
            actor.id, AccionAuditoria.LOGOUT, Usuario.__tablename__, actor.id,
            f"Cierre de sesión de {actor.username}",
        )
        db.commit()

    def me(self, db: Session, actor: ActorContext) -> Usuario:
        user = db.get(Usuario, actor.id)
        if not user:
            raise NotFound("Usuario no encontrado")
        return user
