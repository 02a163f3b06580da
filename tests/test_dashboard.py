"""Tests del dashboard: resumen cacheado, gráficos y alertas."""

from datetime import date, timedelta

from eva.core.cache import cache
from eva.services.dashboard_service import MAIN_STATS_KEY


class TestEstadisticas:
    """Resumen principal."""

    def test_main_stats_sections(self, client, auth_headers, make):
        """Incluye todas las secciones y porcentajes."""
        eq = make.equipo(riesgo="III")
        make.equipo(status=False)
        make.mantenimiento(eq, status="completado")
        make.mantenimiento(eq, fecha_programada=date(2025, 6, 1))
        make.contingencia(eq, severidad="Crítica")
        resp = client.get("/api/dashboard/estadisticas", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["equipos"]["total"] == 2
        assert data["equipos"]["criticos"] == 1
        assert data["equipos"]["porcentaje_activos"] == 50.0
        assert data["equipos"]["con_mantenimiento_vencido"] == 1
        assert data["mantenimientos"]["vencidos"] == 1
        assert data["mantenimientos"]["eficiencia"] == 50.0
        assert data["contingencias"]["criticas"] == 1
        assert data["usuarios"]["por_rol"] == {"Administrador": 1}
        assert data["generado_en"] == "2025-06-15T10:30:00"

    def test_empty_database_has_zero_percentages(self, client, auth_headers):
        """Sin datos los porcentajes son 0, no error."""
        data = client.get("/api/dashboard/estadisticas", headers=auth_headers).json()["data"]
        assert data["equipos"]["porcentaje_activos"] == 0
        assert data["calibraciones"]["cumplimiento"] == 0

    def test_result_is_cached(self, client, auth_headers, make):
        """Escrituras posteriores no se ven hasta limpiar la caché."""
        make.equipo()
        first = client.get("/api/dashboard/estadisticas", headers=auth_headers).json()["data"]
        assert cache.get(MAIN_STATS_KEY) is not None
        make.equipo()
        second = client.get("/api/dashboard/estadisticas", headers=auth_headers).json()["data"]
        assert second["equipos"]["total"] == first["equipos"]["total"] == 1

        assert client.delete("/api/dashboard/cache", headers=auth_headers).status_code == 200
        third = client.get("/api/dashboard/estadisticas", headers=auth_headers).json()["data"]
        assert third["equipos"]["total"] == 2

    def test_clear_cache_admin_only(self, client, tecnico_headers):
        """Solo el administrador limpia la caché."""
        assert client.delete("/api/dashboard/cache", headers=tecnico_headers).status_code == 403

    def test_calibraciones_vigentes_y_proximas(self, client, auth_headers, make, clock):
        """Vigentes: completadas sin vencer; próximas: vencen en 30 días."""
        eq = make.equipo()
        today = clock.today()
        make.calibracion(eq, fecha_vencimiento=today + timedelta(days=10))
        make.calibracion(eq, fecha_vencimiento=today + timedelta(days=200))
        make.calibracion(eq, fecha_vencimiento=today - timedelta(days=1))
        data = client.get("/api/dashboard/estadisticas", headers=auth_headers).json()["data"]["calibraciones"]
        assert data["vigentes"] == 2
        assert data["proximas_vencer"] == 1
        assert data["vencidas"] == 1


class TestGraficos:
    """Series y rankings."""

    def test_mantenimientos_por_mes(self, client, auth_headers, make):
        """Una entrada por mes, del más antiguo al actual."""
        eq = make.equipo()
        make.mantenimiento(eq, fecha_programada=date(2025, 6, 2), status="completado")
        make.mantenimiento(eq, fecha_programada=date(2025, 6, 20))
        make.mantenimiento(eq, fecha_programada=date(2025, 4, 5))
        resp = client.get("/api/dashboard/grafico-mantenimientos", headers=auth_headers, params={"meses": 3})
        data = resp.json()["data"]
        assert [m["mes"] for m in data] == ["2025-04", "2025-05", "2025-06"]
        assert data[-1] == {"mes": "2025-06", "programados": 2, "completados": 1}
        assert data[0]["programados"] == 1

    def test_default_twelve_months_crossing_year(self, client, auth_headers):
        """Por defecto son 12 meses, cruzando el cambio de año."""
        data = client.get("/api/dashboard/grafico-mantenimientos", headers=auth_headers).json()["data"]
        assert len(data) == 12
        assert data[0]["mes"] == "2024-07"

    def test_meses_out_of_range(self, client, auth_headers):
        """meses > 12 -> 422."""
        resp = client.get("/api/dashboard/grafico-mantenimientos", headers=auth_headers, params={"meses": 24})
        assert resp.status_code == 422

    def test_equipos_por_servicio(self, client, auth_headers, make):
        """Ranking por equipos activos."""
        s1 = make.servicio(name="Uno")
        s2 = make.servicio(name="Dos")
        make.equipo(servicio=s1)
        make.equipo(servicio=s2)
        make.equipo(servicio=s2)
        make.equipo(servicio=s1, status=False)
        data = client.get("/api/dashboard/equipos-por-servicio", headers=auth_headers).json()["data"]
        assert data[0] == {"servicio_id": s2.id, "servicio": "Dos", "total": 2}
        assert data[1]["total"] == 1


class TestAlertas:
    """Alertas y actividad reciente."""

    def test_no_alerts_when_clean(self, client, auth_headers):
        """Sin problemas no hay alertas."""
        assert client.get("/api/dashboard/alertas", headers=auth_headers).json()["data"] == []

    def test_alerts_with_counts(self, client, auth_headers, make):
        """Cada alerta trae tipo, conteo y acción."""
        eq = make.equipo()
        make.mantenimiento(eq, fecha_programada=date(2025, 5, 1))
        make.repuesto(stock_actual=0, stock_minimo=1)
        data = client.get("/api/dashboard/alertas", headers=auth_headers).json()["data"]
        by_title = {a["title"]: a for a in data}
        assert set(by_title) == {"Mantenimientos Vencidos", "Repuestos Bajo Stock"}
        assert by_title["Mantenimientos Vencidos"]["type"] == "danger"
        assert by_title["Mantenimientos Vencidos"]["count"] == 1
        assert by_title["Repuestos Bajo Stock"]["action"] == "/repuestos/bajo-stock"

    def test_actividad_reciente(self, client, auth_headers):
        """Devuelve las últimas entradas de la bitácora (el login incluido)."""
        client.post("/api/servicios", headers=auth_headers, json={"name": "Oncología"})
        data = client.get("/api/dashboard/actividad-reciente", headers=auth_headers,
                          params={"limit": 5}).json()["data"]
        assert data[0]["accion"] == "CREATE"
        assert data[-1]["accion"] == "LOGIN"
