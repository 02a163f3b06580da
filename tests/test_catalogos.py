"""Tests de propietarios, contactos, usuarios y roles."""

from eva.db.models.contingencia import Contingencia
from eva.db.models.sesion_token import SesionToken
from eva.db.models.usuario import Usuario


class TestPropietarios:
    """CRUD con orden alfabético por defecto."""

    def test_default_order_by_nombre(self, client, auth_headers):
        """El listado sale ordenado por nombre ascendente."""
        for nombre in ("Comodato Philips", "Arriendo GE", "Hospital"):
            client.post("/api/propietarios", headers=auth_headers, json={"nombre": nombre})
        resp = client.get("/api/propietarios", headers=auth_headers)
        assert [p["nombre"] for p in resp.json()["data"]["data"]] == ["Arriendo GE", "Comodato Philips", "Hospital"]

    def test_delete_blocked_by_equipos(self, client, auth_headers, make):
        """Un propietario con equipos no se elimina."""
        resp = client.post("/api/propietarios", headers=auth_headers, json={"nombre": "Hospital"})
        prop_id = resp.json()["data"]["id"]
        make.equipo(propietario_id=prop_id)
        resp = client.delete(f"/api/propietarios/{prop_id}", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "No se puede eliminar el propietario porque tiene 1 equipos asociados"


class TestContactos:
    """Contactos por equipo."""

    def test_create_and_por_equipo(self, client, auth_headers, make):
        """Un contacto ligado a un equipo aparece en su listado."""
        eq = make.equipo()
        resp = client.post("/api/contactos", headers=auth_headers, json={
            "nombre": "Soporte Técnico", "email": "soporte@proveedor.com", "tipo": "soporte", "equipo_id": eq.id,
        })
        assert resp.status_code == 201
        listado = client.get(f"/api/contactos/por-equipo/{eq.id}", headers=auth_headers).json()["data"]
        assert [c["nombre"] for c in listado] == ["Soporte Técnico"]

    def test_invalid_tipo(self, client, auth_headers):
        """tipo fuera de catálogo -> 422."""
        resp = client.post("/api/contactos", headers=auth_headers, json={"nombre": "X", "tipo": "amigo"})
        assert "tipo" in resp.json()["errors"]


class TestUsuarios:
    """Gestión de usuarios (solo administrador escribe)."""

    def test_duplicate_email_and_username(self, client, auth_headers, make):
        """email y username son únicos."""
        rol = make.rol("Usuario")
        make.usuario("Usuario", username="jdoe", email="jdoe@hospital.com")
        resp = client.post("/api/usuarios", headers=auth_headers, json={
            "nombre": "J", "apellido": "D", "email": "JDOE@hospital.com", "username": "jdoe",
            "password": "clave123", "rol_id": rol.id,
        })
        assert resp.status_code == 422
        assert {"email", "username"} <= set(resp.json()["errors"])

    def test_short_password(self, client, auth_headers, make):
        """La contraseña requiere al menos 6 caracteres."""
        rol = make.rol("Usuario")
        resp = client.post("/api/usuarios", headers=auth_headers, json={
            "nombre": "J", "apellido": "D", "email": "j@hospital.com", "username": "jd",
            "password": "123", "rol_id": rol.id,
        })
        assert "password" in resp.json()["errors"]

    def test_delete_blocked_by_reported_contingencies(self, client, auth_headers, make):
        """Un usuario con contingencias reportadas no se elimina."""
        user = make.usuario("Usuario")
        make.contingencia(make.equipo(), usuario_reporta=user.id)
        resp = client.delete(f"/api/usuarios/{user.id}", headers=auth_headers)
        assert resp.status_code == 400
        assert "contingencias reportadas" in resp.json()["message"]

    def test_delete_purges_sessions_and_unassigns(self, client, auth_headers, make, login_as, db):
        """Al eliminar se borran sus sesiones y se liberan asignaciones."""
        user = make.usuario("Tecnico", username="saliente")
        login_as("saliente")
        cont = make.contingencia(make.equipo(), usuario_asignado=user.id)
        resp = client.delete(f"/api/usuarios/{user.id}", headers=auth_headers)
        assert resp.status_code == 200
        db.expunge_all()
        assert db.query(Usuario).filter(Usuario.id == user.id).first() is None
        assert db.query(SesionToken).filter(SesionToken.usuario_id == user.id).count() == 0
        assert db.get(Contingencia, cont.id).usuario_asignado is None

    def test_toggle_estado(self, client, auth_headers, make):
        """toggle-status alterna estado."""
        user = make.usuario("Usuario")
        resp = client.patch(f"/api/usuarios/{user.id}/toggle-status", headers=auth_headers)
        assert resp.json()["data"]["estado"] is False


class TestRoles:
    """Roles base y borrado."""

    def test_seeded_roles(self, client, auth_headers):
        """Los tres roles base existen."""
        data = client.get("/api/roles/activos", headers=auth_headers).json()["data"]
        assert {r["nombre"] for r in data} == {"Administrador", "Tecnico", "Usuario"}

    def test_delete_role_in_use(self, client, auth_headers, make):
        """Un rol con usuarios no se elimina."""
        rol = make.rol("Administrador")
        resp = client.delete(f"/api/roles/{rol.id}", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "No se puede eliminar el rol porque tiene 1 usuarios asignados"

    def test_tecnico_cannot_create_role(self, client, tecnico_headers):
        """Crear roles es de administrador."""
        assert client.post("/api/roles", headers=tecnico_headers, json={"nombre": "Auditor"}).status_code == 403
