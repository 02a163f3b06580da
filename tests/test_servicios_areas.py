"""Tests del CRUD genérico sobre servicios y áreas."""

from eva.db.models.area import Area
from eva.db.models.auditoria import AuditoriaLog
from eva.db.models.servicio import Servicio


class TestServiciosCrud:
    """Crear, listar, detalle, actualizar y alternar estado."""

    def test_create_sets_owner_and_audits(self, client, auth_headers, admin, db):
        """POST crea, asigna el usuario actual y deja entrada CREATE."""
        resp = client.post("/api/servicios", headers=auth_headers, json={
            "name": "Urgencias", "codigo": "URG", "email": "urgencias@hospital.com",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Servicio creado exitosamente"
        assert body["data"]["usuario_id"] == admin.id
        assert body["data"]["activo"] is True
        log = db.query(AuditoriaLog).filter(AuditoriaLog.tabla == "servicios").one()
        assert log.accion == "CREATE"
        assert log.registro_id == body["data"]["id"]

    def test_create_validation_errors(self, client, auth_headers):
        """Sin nombre y con email inválido -> 422 con ambos campos."""
        resp = client.post("/api/servicios", headers=auth_headers, json={"email": "no-valido"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Error de validación"
        assert set(body["errors"]) == {"name", "email"}

    def test_duplicate_codigo(self, client, auth_headers, make):
        """codigo debe ser único."""
        make.servicio(codigo="UCI")
        resp = client.post("/api/servicios", headers=auth_headers, json={"name": "Otra UCI", "codigo": "uci"})
        assert resp.status_code == 422
        assert "codigo" in resp.json()["errors"]

    def test_list_paginated_with_search(self, client, auth_headers, make):
        """El listado pagina y busca por nombre."""
        make.servicio(name="Pediatría")
        make.servicio(name="Neonatología")
        make.servicio(name="Cardiología")
        resp = client.get("/api/servicios", headers=auth_headers, params={"search": "ología", "per_page": 1})
        page = resp.json()["data"]
        assert resp.status_code == 200
        assert page["total"] == 2
        assert page["per_page"] == 1
        assert page["last_page"] == 2
        assert len(page["data"]) == 1

    def test_activos_not_captured_by_id_route(self, client, auth_headers, make):
        """/activos es una ruta propia y solo devuelve activos."""
        make.servicio(name="A", activo=True)
        make.servicio(name="B", activo=False)
        resp = client.get("/api/servicios/activos", headers=auth_headers)
        assert resp.status_code == 200
        assert [s["name"] for s in resp.json()["data"]] == ["A"]

    def test_get_not_found(self, client, auth_headers):
        """Un id inexistente -> 404 con mensaje del recurso."""
        resp = client.get("/api/servicios/999", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["message"] == "Servicio no encontrado"

    def test_get_includes_statistics(self, client, auth_headers, make):
        """El detalle incluye los indicadores del servicio."""
        srv = make.servicio()
        make.equipo(servicio=srv, costo=1000)
        make.equipo(servicio=srv, costo=2000, riesgo="III")
        make.equipo(servicio=srv, costo=None, status=False)
        resp = client.get(f"/api/servicios/{srv.id}", headers=auth_headers)
        stats = resp.json()["data"]["estadisticas"]
        assert stats["total_equipos"] == 3
        assert stats["equipos_por_estado"] == {"activos": 2, "inactivos": 1}
        assert stats["valor_total_equipos"] == 3000
        assert stats["equipos_criticos"] == 1

    def test_update_is_partial_and_audits_diff(self, client, auth_headers, make, db):
        """PUT solo toca los campos enviados y audita el cambio."""
        srv = make.servicio(name="Rayos", responsable="Dra. Vega")
        resp = client.put(f"/api/servicios/{srv.id}", headers=auth_headers, json={"name": "Imagenología"})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["name"] == "Imagenología"
        assert data["responsable"] == "Dra. Vega"
        log = db.query(AuditoriaLog).filter(AuditoriaLog.accion == "UPDATE").one()
        assert log.datos_anteriores == {"name": "Rayos"}
        assert log.datos_nuevos == {"name": "Imagenología"}

    def test_same_update_twice_is_idempotent(self, client, auth_headers, make):
        """Repetir el mismo PUT deja el mismo estado."""
        srv = make.servicio(name="Rayos", responsable="Dra. Vega")
        payload = {"name": "Imagenología", "telefono": "2222-3333"}
        first = client.put(f"/api/servicios/{srv.id}", headers=auth_headers, json=payload).json()["data"]
        second = client.put(f"/api/servicios/{srv.id}", headers=auth_headers, json=payload).json()["data"]
        first.pop("updated_at")
        second.pop("updated_at")
        assert first == second
        assert second["responsable"] == "Dra. Vega"

    def test_get_id_zero_is_not_found(self, client, auth_headers):
        """El id 0 no existe -> 404, no error de validación."""
        assert client.get("/api/servicios/0", headers=auth_headers).status_code == 404

    def test_update_ignores_protected_fields(self, client, auth_headers, make):
        """id y usuario_id no se pueden sobrescribir."""
        srv = make.servicio(usuario_id=None)
        resp = client.put(f"/api/servicios/{srv.id}", headers=auth_headers, json={"id": 500, "usuario_id": 77})
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == srv.id
        assert resp.json()["data"]["usuario_id"] is None

    def test_toggle_twice_restores(self, client, auth_headers, make):
        """Alternar dos veces devuelve el estado original."""
        srv = make.servicio(activo=True)
        first = client.patch(f"/api/servicios/{srv.id}/toggle-status", headers=auth_headers)
        assert first.json()["data"]["activo"] is False
        assert first.json()["message"] == "Servicio desactivado exitosamente"
        second = client.patch(f"/api/servicios/{srv.id}/toggle-status", headers=auth_headers)
        assert second.json()["data"]["activo"] is True

    def test_requires_authentication(self, client):
        """Sin token -> 401."""
        assert client.get("/api/servicios").status_code == 401


class TestServiciosDelete:
    """Integridad referencial al eliminar."""

    def test_delete_blocked_by_active_areas(self, client, auth_headers, make, db):
        """Con áreas activas el borrado se rechaza con el conteo."""
        srv = make.servicio()
        make.area(servicio=srv)
        make.area(servicio=srv)
        resp = client.delete(f"/api/servicios/{srv.id}", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "No se puede eliminar el servicio porque tiene 2 áreas asignadas"
        assert db.get(Servicio, srv.id) is not None

    def test_delete_flow_through_api(self, client, auth_headers):
        """Servicio con un área activa: 400; sin ella, se elimina y el área suelta sigue."""
        suelta = client.post("/api/areas", headers=auth_headers, json={"name": "Bodega"}).json()["data"]
        srv = client.post("/api/servicios", headers=auth_headers, json={"name": "Oncología"}).json()["data"]
        ligada = client.post("/api/areas", headers=auth_headers,
                             json={"name": "Quimioterapia", "servicio_id": srv["id"]}).json()["data"]
        assert ligada["servicio_id"] == srv["id"]

        resp = client.delete(f"/api/servicios/{srv['id']}", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "No se puede eliminar el servicio porque tiene 1 áreas asignadas"

        assert client.delete(f"/api/areas/{ligada['id']}", headers=auth_headers).status_code == 200
        resp = client.delete(f"/api/servicios/{srv['id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/servicios/{srv['id']}", headers=auth_headers).status_code == 404
        assert client.get(f"/api/areas/{suelta['id']}", headers=auth_headers).status_code == 200

    def test_delete_blocked_by_users(self, client, auth_headers, make):
        """Usuarios asignados también bloquean el borrado."""
        srv = make.servicio()
        make.usuario("Usuario", servicio_id=srv.id)
        resp = client.delete(f"/api/servicios/{srv.id}", headers=auth_headers)
        assert resp.status_code == 400
        assert "1 usuarios asignados" in resp.json()["message"]

    def test_delete_unlinks_inactive_children(self, client, auth_headers, make, db):
        """Áreas inactivas no bloquean y quedan sin servicio."""
        srv = make.servicio()
        area = make.area(servicio=srv, status=False)
        resp = client.delete(f"/api/servicios/{srv.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Servicio eliminado exitosamente"
        db.expunge_all()
        assert db.query(Servicio).filter(Servicio.id == srv.id).first() is None
        assert db.get(Area, area.id).servicio_id is None


class TestServiciosExtras:
    """Jerarquía y estadísticas."""

    def test_jerarquia_only_active_with_areas(self, client, auth_headers, make):
        """Solo servicios activos, con sus áreas anidadas."""
        s1 = make.servicio(name="Cirugía")
        make.servicio(name="Cerrado", activo=False)
        make.area(servicio=s1, name="Pabellón 1")
        make.area(servicio=s1, name="Pabellón 2")
        resp = client.get("/api/servicios/jerarquia", headers=auth_headers)
        data = resp.json()["data"]
        assert [s["name"] for s in data] == ["Cirugía"]
        assert [a["name"] for a in data[0]["areas"]] == ["Pabellón 1", "Pabellón 2"]

    def test_estadisticas_route(self, client, auth_headers, make):
        """GET /{id}/estadisticas cuenta áreas y usuarios."""
        srv = make.servicio()
        make.area(servicio=srv)
        make.area(servicio=srv, status=False)
        make.usuario("Usuario", servicio_id=srv.id)
        resp = client.get(f"/api/servicios/{srv.id}/estadisticas", headers=auth_headers)
        data = resp.json()["data"]
        assert data["total_areas"] == 2
        assert data["areas_activas"] == 1
        assert data["total_usuarios"] == 1
        assert data["valor_total_equipos"] == 0


class TestAreas:
    """Áreas: mensajes en femenino y filtros por servicio."""

    def test_create_area_message(self, client, auth_headers, make):
        """El mensaje concuerda en género."""
        srv = make.servicio()
        resp = client.post("/api/areas", headers=auth_headers, json={"name": "Box 1", "servicio_id": srv.id})
        assert resp.status_code == 201
        assert resp.json()["message"] == "Área creada exitosamente"
        assert resp.json()["data"]["servicio"]["id"] == srv.id

    def test_area_unknown_servicio(self, client, auth_headers):
        """servicio_id inexistente -> 422."""
        resp = client.post("/api/areas", headers=auth_headers, json={"name": "Box 1", "servicio_id": 404})
        assert resp.status_code == 422
        assert "servicio_id" in resp.json()["errors"]

    def test_filter_by_servicios_list(self, client, auth_headers, make):
        """servicios[] filtra con IN."""
        s1, s2, s3 = make.servicio(), make.servicio(), make.servicio()
        for s in (s1, s2, s3):
            make.area(servicio=s)
        resp = client.get(
            "/api/areas", headers=auth_headers,
            params=[("servicios[]", s1.id), ("servicios[]", s3.id)],
        )
        ids = {a["servicio_id"] for a in resp.json()["data"]["data"]}
        assert ids == {s1.id, s3.id}

    def test_por_servicio(self, client, auth_headers, make):
        """/por-servicio/{id} devuelve las áreas del servicio."""
        srv = make.servicio()
        make.area(servicio=srv)
        make.area()
        resp = client.get(f"/api/areas/por-servicio/{srv.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 1

    def test_delete_area_blocked_by_active_equipos(self, client, auth_headers, make):
        """Un área con equipos activos no se elimina."""
        area = make.area()
        make.equipo(area=area)
        resp = client.delete(f"/api/areas/{area.id}", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "No se puede eliminar el área porque tiene 1 equipos asignados"
