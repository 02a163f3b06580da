"""Tests de repuestos e inventario."""

from eva.db.models.repuesto import MovimientoRepuesto


class TestRepuestos:
    """Alta, stock y movimientos."""

    def test_create(self, client, auth_headers):
        """Alta con los campos obligatorios."""
        resp = client.post("/api/repuestos", headers=auth_headers, json={
            "nombre": "Batería 12V", "codigo": "BAT-12", "categoria": "Baterías",
            "stock_actual": 1, "stock_minimo": 3, "unidad_medida": "unidad", "critico": True,
        })
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["bajo_stock"] is True
        assert data["estado"] == "activo"

    def test_search_percent_is_literal(self, client, auth_headers, make):
        """Buscar "50%" no trae "500 ml"."""
        make.repuesto(nombre="Filtro 50% eficiencia")
        make.repuesto(nombre="Filtro 500 ml")
        resp = client.get("/api/repuestos", headers=auth_headers, params={"search": "50%"})
        assert [r["nombre"] for r in resp.json()["data"]["data"]] == ["Filtro 50% eficiencia"]

    def test_update_ignores_stock_actual(self, client, auth_headers, make):
        """El stock no se cambia por PUT."""
        r = make.repuesto(stock_actual=5)
        resp = client.put(f"/api/repuestos/{r.id}", headers=auth_headers,
                          json={"stock_actual": 99, "ubicacion": "Bodega 2"})
        assert resp.status_code == 200
        assert resp.json()["data"]["stock_actual"] == 5
        assert resp.json()["data"]["ubicacion"] == "Bodega 2"

    def test_entrada(self, client, auth_headers, make, admin):
        """Una entrada suma stock y registra el movimiento."""
        r = make.repuesto(stock_actual=4)
        resp = client.post(f"/api/repuestos/{r.id}/entrada", headers=auth_headers,
                           json={"cantidad": 6, "motivo": "Compra OC-778"})
        assert resp.status_code == 201
        body = resp.json()["data"]
        assert body["repuesto"]["stock_actual"] == 10
        assert body["movimiento"]["stock_anterior"] == 4
        assert body["movimiento"]["stock_nuevo"] == 10
        assert body["movimiento"]["usuario_id"] == admin.id

    def test_salida_insuficiente(self, client, auth_headers, make, db):
        """Una salida mayor al stock se rechaza sin tocar nada."""
        r = make.repuesto(stock_actual=2)
        resp = client.post(f"/api/repuestos/{r.id}/salida", headers=auth_headers,
                           json={"cantidad": 3, "motivo": "Reparación"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Stock insuficiente"
        assert resp.json()["errors"]["cantidad"] == ["Stock disponible: 2"]
        assert db.query(MovimientoRepuesto).count() == 0

    def test_salida_to_zero(self, client, auth_headers, make):
        """Se puede sacar todo el stock."""
        r = make.repuesto(stock_actual=2)
        resp = client.post(f"/api/repuestos/{r.id}/salida", headers=auth_headers,
                           json={"cantidad": 2, "motivo": "Reparación"})
        assert resp.json()["data"]["repuesto"]["stock_actual"] == 0

    def test_movimiento_invalid_cantidad(self, client, auth_headers, make):
        """cantidad debe ser >= 1."""
        r = make.repuesto()
        resp = client.post(f"/api/repuestos/{r.id}/entrada", headers=auth_headers,
                           json={"cantidad": 0, "motivo": "x"})
        assert resp.status_code == 422
        assert "cantidad" in resp.json()["errors"]

    def test_movimientos_history_blocks_delete(self, client, auth_headers, make):
        """Con movimientos el repuesto no se elimina."""
        r = make.repuesto()
        client.post(f"/api/repuestos/{r.id}/entrada", headers=auth_headers, json={"cantidad": 1, "motivo": "x"})
        client.post(f"/api/repuestos/{r.id}/salida", headers=auth_headers, json={"cantidad": 1, "motivo": "y"})
        history = client.get(f"/api/repuestos/{r.id}/movimientos", headers=auth_headers).json()["data"]
        assert [m["tipo"] for m in history] == ["salida", "entrada"]
        resp = client.delete(f"/api/repuestos/{r.id}", headers=auth_headers)
        assert resp.status_code == 400

    def test_bajo_stock(self, client, auth_headers, make):
        """Activos con stock <= mínimo, críticos primero."""
        a = make.repuesto(nombre="Zeta", stock_actual=1, stock_minimo=5, critico=True)
        b = make.repuesto(nombre="Alfa", stock_actual=2, stock_minimo=2)
        make.repuesto(stock_actual=9, stock_minimo=2)
        make.repuesto(stock_actual=0, stock_minimo=1, estado="descontinuado")
        resp = client.get("/api/repuestos/bajo-stock", headers=auth_headers)
        assert [r["id"] for r in resp.json()["data"]] == [a.id, b.id]
