"""Tests de la caché TTL y del sobre de respuesta."""

import json
import time

from eva.core.cache import TTLCache
from eva.core.envelope import build_body, created, fail, ok


class TestTTLCache:
    """get/put/forget/remember."""

    def test_put_and_get(self):
        """Un valor guardado se recupera antes del TTL."""
        c = TTLCache()
        c.put("k", {"a": 1}, 60)
        assert c.get("k") == {"a": 1}

    def test_expired_entry_is_miss(self):
        """Pasado el TTL la entrada desaparece."""
        c = TTLCache()
        c.put("k", "v", 0.01)
        time.sleep(0.02)
        assert c.get("k") is None
        assert c.stats()["size"] == 0

    def test_forget(self):
        """forget elimina la clave."""
        c = TTLCache()
        c.put("k", "v", 60)
        c.forget("k")
        assert c.get("k") is None

    def test_remember_computes_once(self):
        """remember solo llama al productor en el primer acceso."""
        c = TTLCache()
        calls = []

        def producer():
            calls.append(1)
            return len(calls)

        assert c.remember("k", 60, producer) == 1
        assert c.remember("k", 60, producer) == 1
        assert len(calls) == 1

    def test_max_size_evicts_oldest(self):
        """Al llenarse se descarta la entrada más antigua."""
        c = TTLCache(max_size=2)
        c.put("a", 1, 60)
        c.put("b", 2, 60)
        c.put("c", 3, 60)
        assert c.get("a") is None
        assert c.get("c") == 3

    def test_stats_hit_rate(self):
        """stats cuenta aciertos y fallos."""
        c = TTLCache()
        c.get("x")
        c.put("x", 1, 60)
        c.get("x")
        stats = c.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5


class TestEnvelope:
    """Forma {success, message, data, errors}."""

    def test_success_depends_on_status(self):
        """success es True solo para status < 400."""
        assert build_body(status_code=200)["success"] is True
        assert build_body(status_code=422)["success"] is False

    def test_ok_body(self):
        """ok envuelve los datos con status 200."""
        resp = ok({"id": 1}, "Listo")
        body = json.loads(resp.body)
        assert resp.status_code == 200
        assert body == {"success": True, "message": "Listo", "data": {"id": 1}, "errors": None}

    def test_created_status(self):
        """created usa 201."""
        assert created({"id": 2}).status_code == 201

    def test_fail_body(self):
        """fail lleva errores y data nula."""
        resp = fail("Error de validación", 422, {"name": ["El campo name es obligatorio."]})
        body = json.loads(resp.body)
        assert resp.status_code == 422
        assert body["success"] is False
        assert body["data"] is None
        assert body["errors"] == {"name": ["El campo name es obligatorio."]}
