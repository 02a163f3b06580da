"""Tests de login, logout, sesión y roles."""

from eva.db.models.auditoria import AuditoriaLog
from eva.db.models.sesion_token import SesionToken


class TestLogin:
    """POST /api/auth/login."""

    def test_login_by_username(self, client, admin):
        """Credenciales correctas devuelven token y usuario."""
        resp = client.post("/api/auth/login", json={"username": "admin", "password": "secreto123"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Login exitoso"
        assert body["data"]["token_type"] == "Bearer"
        assert body["data"]["user"]["username"] == "admin"
        assert "password" not in body["data"]["user"]

    def test_login_by_email_case_insensitive(self, client, admin):
        """El identificador puede ser el email, sin importar mayúsculas."""
        resp = client.post("/api/auth/login", json={"username": "ADMIN@hospital.com", "password": "secreto123"})
        assert resp.status_code == 200

    def test_login_with_form(self, client, admin):
        """También acepta x-www-form-urlencoded."""
        resp = client.post("/api/auth/login", data={"username": "admin", "password": "secreto123"})
        assert resp.status_code == 200

    def test_wrong_password(self, client, admin):
        """Contraseña incorrecta -> 401."""
        resp = client.post("/api/auth/login", json={"username": "admin", "password": "otra"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Credenciales incorrectas"

    def test_inactive_user(self, client, make):
        """Un usuario inactivo no puede entrar."""
        make.usuario(username="baja", estado=False)
        resp = client.post("/api/auth/login", json={"username": "baja", "password": "secreto123"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Usuario inactivo"

    def test_missing_fields(self, client):
        """Sin credenciales -> 422 con errores por campo."""
        resp = client.post("/api/auth/login", json={})
        assert resp.status_code == 422
        assert "username" in resp.json()["errors"]

    def test_login_is_audited_and_creates_session(self, client, admin, db):
        """El login registra la sesión y una entrada LOGIN."""
        client.post("/api/auth/login", json={"username": "admin", "password": "secreto123"})
        assert db.query(SesionToken).filter(SesionToken.usuario_id == admin.id).count() == 1
        assert db.query(AuditoriaLog).filter(AuditoriaLog.accion == "LOGIN").count() == 1


class TestSession:
    """Token Bearer, /me y /logout."""

    def test_me(self, client, auth_headers):
        """/me devuelve al usuario autenticado."""
        resp = client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["username"] == "admin"
        assert resp.json()["data"]["rol"]["nombre"] == "Administrador"

    def test_missing_token(self, client):
        """Sin token -> 401 con WWW-Authenticate."""
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json()["success"] is False
        assert resp.headers["www-authenticate"].startswith("Bearer")

    def test_invalid_token(self, client):
        """Un token mal formado -> 401."""
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer basura"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Token inválido"

    def test_logout_revokes_token(self, client, auth_headers):
        """Tras el logout el mismo token deja de servir."""
        resp = client.post("/api/auth/logout", headers=auth_headers)
        assert resp.status_code == 200
        again = client.get("/api/auth/me", headers=auth_headers)
        assert again.status_code == 401
        assert again.json()["message"] == "Sesión cerrada"

    def test_deactivated_user_token_rejected(self, client, auth_headers, admin, db):
        """Si el usuario se desactiva, su token ya emitido deja de valer."""
        admin.estado = False
        db.commit()
        resp = client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 401


class TestRoles:
    """Escritura restringida a Administrador."""

    def test_tecnico_cannot_create_user(self, client, tecnico_headers, make):
        """Un técnico recibe 403 al crear usuarios."""
        rol = make.rol("Usuario")
        resp = client.post("/api/usuarios", headers=tecnico_headers, json={
            "nombre": "Luis", "apellido": "Soto", "email": "luis@hospital.com",
            "username": "lsoto", "password": "clave123", "rol_id": rol.id,
        })
        assert resp.status_code == 403
        assert resp.json()["success"] is False
        assert resp.json()["message"] == "Rol insuficiente para esta operación"
        assert resp.json()["data"] is None

    def test_tecnico_can_read_users(self, client, tecnico_headers):
        """La lectura de usuarios está abierta a cualquier autenticado."""
        assert client.get("/api/usuarios", headers=tecnico_headers).status_code == 200

    def test_admin_creates_user_with_hashed_password(self, client, auth_headers, make, db):
        """El administrador crea usuarios y la contraseña se guarda hasheada."""
        rol = make.rol("Tecnico")
        resp = client.post("/api/usuarios", headers=auth_headers, json={
            "nombre": "Luis", "apellido": "Soto", "email": "luis@hospital.com",
            "username": "lsoto", "password": "clave123", "rol_id": rol.id,
        })
        assert resp.status_code == 201
        assert "password" not in resp.json()["data"]
        log = (
            db.query(AuditoriaLog)
              .filter(AuditoriaLog.accion == "CREATE", AuditoriaLog.tabla == "usuarios")
              .one()
        )
        assert log.datos_nuevos["password"] == "***"
        login = client.post("/api/auth/login", json={"username": "lsoto", "password": "clave123"})
        assert login.status_code == 200
