"""Tests de mantenimientos: ciclo de vida y vencidos."""

from datetime import date

from eva.db.models.equipo import Equipo


class TestMantenimientosCrud:
    """Alta y reglas de borrado."""

    def test_create(self, client, auth_headers, make, admin):
        """Se crea con equipo existente y estado por defecto."""
        eq = make.equipo()
        resp = client.post("/api/mantenimientos", headers=auth_headers, json={
            "equipo_id": eq.id, "description": "Cambio de filtros", "tipo": "preventivo",
            "fecha_programada": "2025-07-01", "tecnico_id": admin.id,
        })
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["status"] == "programado"
        assert data["equipo"]["code"] == eq.code
        assert data["tecnico"]["id"] == admin.id

    def test_create_invalid(self, client, auth_headers):
        """Tipo fuera de catálogo y equipo inexistente."""
        resp = client.post("/api/mantenimientos", headers=auth_headers, json={
            "equipo_id": 999, "description": "x", "tipo": "magico", "fecha_programada": "2025-07-01",
        })
        assert resp.status_code == 422
        assert {"equipo_id", "tipo"} <= set(resp.json()["errors"])

    def test_fecha_fin_before_inicio(self, client, auth_headers, make):
        """fecha_fin no puede ser anterior a fecha_inicio."""
        eq = make.equipo()
        resp = client.post("/api/mantenimientos", headers=auth_headers, json={
            "equipo_id": eq.id, "description": "x", "tipo": "correctivo", "fecha_programada": "2025-07-01",
            "fecha_inicio": "2025-07-02", "fecha_fin": "2025-07-01",
        })
        assert "fecha_fin" in resp.json()["errors"]

    def test_only_programado_can_be_deleted(self, client, auth_headers, make):
        """Un mantenimiento completado no se elimina."""
        eq = make.equipo()
        m = make.mantenimiento(eq, status="completado")
        resp = client.delete(f"/api/mantenimientos/{m.id}", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Solo se pueden eliminar mantenimientos programados"

    def test_delete_programado(self, client, auth_headers, make):
        """Un programado sí se elimina."""
        m = make.mantenimiento(make.equipo())
        assert client.delete(f"/api/mantenimientos/{m.id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/mantenimientos/{m.id}", headers=auth_headers).status_code == 404


class TestCompletarCancelar:
    """Transiciones de estado."""

    def test_completar_sets_dates(self, client, auth_headers, make, db, clock):
        """Completar fija fecha_fin/inicio y la fecha de mantenimiento del equipo."""
        eq = make.equipo()
        m = make.mantenimiento(eq, fecha_programada=date(2025, 6, 1))
        resp = client.patch(f"/api/mantenimientos/{m.id}/completar", headers=auth_headers,
                            json={"observaciones": "OK", "costo": 120})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["status"] == "completado"
        assert data["fecha_fin"] == clock.today().isoformat()
        assert data["fecha_inicio"] == clock.today().isoformat()
        assert data["costo"] == 120
        db.expire_all()
        assert db.get(Equipo, eq.id).fecha_mantenimiento == clock.today()

    def test_completar_without_body(self, client, auth_headers, make):
        """El cuerpo es opcional."""
        m = make.mantenimiento(make.equipo())
        assert client.patch(f"/api/mantenimientos/{m.id}/completar", headers=auth_headers).status_code == 200

    def test_completar_twice(self, client, auth_headers, make):
        """No se completa dos veces."""
        m = make.mantenimiento(make.equipo(), status="completado")
        resp = client.patch(f"/api/mantenimientos/{m.id}/completar", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "El mantenimiento ya está completado"

    def test_completar_cancelado(self, client, auth_headers, make):
        """Un cancelado no se puede completar."""
        m = make.mantenimiento(make.equipo(), status="cancelado")
        resp = client.patch(f"/api/mantenimientos/{m.id}/completar", headers=auth_headers)
        assert resp.json()["message"] == "No se puede completar un mantenimiento cancelado"

    def test_cancelar_requires_reason(self, client, auth_headers, make):
        """Cancelar exige motivo."""
        m = make.mantenimiento(make.equipo())
        resp = client.patch(f"/api/mantenimientos/{m.id}/cancelar", headers=auth_headers, json={})
        assert resp.status_code == 422
        assert "motivo_cancelacion" in resp.json()["errors"]

    def test_cancelar(self, client, auth_headers, make):
        """Cancelar guarda el motivo."""
        m = make.mantenimiento(make.equipo())
        resp = client.patch(f"/api/mantenimientos/{m.id}/cancelar", headers=auth_headers,
                            json={"motivo_cancelacion": "Equipo dado de baja"})
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "cancelado"
        assert resp.json()["data"]["motivo_cancelacion"] == "Equipo dado de baja"

    def test_cancelar_completado(self, client, auth_headers, make):
        """Un completado no se cancela."""
        m = make.mantenimiento(make.equipo(), status="completado")
        resp = client.patch(f"/api/mantenimientos/{m.id}/cancelar", headers=auth_headers,
                            json={"motivo_cancelacion": "x"})
        assert resp.status_code == 400


class TestVencidos:
    """Pendientes con fecha programada pasada."""

    def test_vencidos(self, client, auth_headers, make):
        """Solo programados/en proceso anteriores a hoy."""
        eq = make.equipo()
        a = make.mantenimiento(eq, fecha_programada=date(2025, 6, 1))
        b = make.mantenimiento(eq, fecha_programada=date(2025, 5, 1), status="en_proceso")
        make.mantenimiento(eq, fecha_programada=date(2025, 5, 1), status="completado")
        make.mantenimiento(eq, fecha_programada=date(2025, 6, 15))
        resp = client.get("/api/mantenimientos/vencidos", headers=auth_headers)
        assert [m["id"] for m in resp.json()["data"]] == [b.id, a.id]

    def test_por_equipo(self, client, auth_headers, make):
        """Historial del equipo, más reciente primero."""
        eq = make.equipo()
        old = make.mantenimiento(eq, fecha_programada=date(2025, 1, 1))
        new = make.mantenimiento(eq, fecha_programada=date(2025, 3, 1))
        make.mantenimiento(make.equipo())
        resp = client.get(f"/api/mantenimientos/por-equipo/{eq.id}", headers=auth_headers)
        assert [m["id"] for m in resp.json()["data"]] == [new.id, old.id]

    def test_date_range_on_list(self, client, auth_headers, make):
        """El listado filtra por fecha_programada."""
        eq = make.equipo()
        make.mantenimiento(eq, fecha_programada=date(2025, 1, 15))
        make.mantenimiento(eq, fecha_programada=date(2025, 3, 15))
        resp = client.get("/api/mantenimientos", headers=auth_headers,
                          params={"date_from": "2025-01-01", "date_to": "2025-01-31"})
        assert resp.json()["data"]["total"] == 1
