"""
API 路由测试 (FastAPI TestClient)

运行测试：
    cd backend
    pytest tests/test_routes.py -v
"""

import httpx
import pytest
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

import akamai_compat.routes_fastapi as akamai_routes
import dimension_cache.routes as dimension_routes
from akamai_compat.config import CompatConfig
from akamai_compat.translator import AkamaiTranslator
from dimension_cache.cache import DimensionsRecord
from dimension_cache.fetcher import DimensionFetcher
from main import app
from conftest import assert_query, url


@pytest.fixture
def client():
    # 不使用 with：lifespan 会关闭共享的 dimension_fetcher
    return TestClient(app)


@pytest.fixture(autouse=True)
def clean_dimension_cache():
    dimension_routes.dimension_cache.clear()
    yield
    dimension_routes.dimension_cache.clear()


def use_config(monkeypatch, config):
    monkeypatch.setattr(akamai_routes, "compat_config", config)
    monkeypatch.setattr(akamai_routes, "translator", AkamaiTranslator(config))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# ============================================
# 1. /api/akamai
# ============================================

class TestAkamaiRoutes:
    """/api/akamai 测试"""

    def test_detect(self, client, monkeypatch):
        use_config(monkeypatch, CompatConfig())
        response = client.get("/api/akamai/detect", params={"url": url("imwidth=400")})

        assert response.status_code == 200
        assert response.json()["detected"] is True

    def test_detect_plain_url(self, client, monkeypatch):
        use_config(monkeypatch, CompatConfig())
        response = client.get("/api/akamai/detect", params={"url": url("width=400")})
        assert response.json()["detected"] is False

    def test_translate(self, client, monkeypatch):
        use_config(monkeypatch, CompatConfig())

        response = client.get("/api/akamai/translate", params={"url": url("im=Resize=width:400,height:300")})
        data = response.json()

        assert response.status_code == 200
        assert response.headers["X-Akamai-Compatibility"] == "Enabled"
        assert data["success"] is True
        assert data["detected"] is True
        assert data["options"] == {"width": 400, "height": 300}
        assert_query(data["translated_url"], width="400", height="300")

    def test_translate_plain_url(self, client, monkeypatch):
        use_config(monkeypatch, CompatConfig())
        original = url("width=400")

        response = client.get("/api/akamai/translate", params={"url": original})
        data = response.json()

        assert "X-Akamai-Compatibility" not in response.headers
        assert data["detected"] is False
        assert data["options"] == {}
        assert data["translated_url"] == original

    def test_translate_with_advanced_features(self, client, monkeypatch):
        use_config(monkeypatch, CompatConfig(enable_advanced_features=True))

        response = client.get("/api/akamai/translate", params={"url": url("im.aspect=16:9")})

        assert response.json()["options"] == {"aspect": "16:9", "gravity": "auto"}

    def test_compatibility_disabled(self, client, monkeypatch):
        """测试：兼容关闭时 URL 原样返回"""
        use_config(monkeypatch, CompatConfig(enable_compatibility=False))
        original = url("imwidth=400")

        response = client.get("/api/akamai/translate", params={"url": original})
        data = response.json()

        assert "X-Akamai-Compatibility" not in response.headers
        assert data["detected"] is False
        assert data["translated_url"] == original
        assert client.get("/api/akamai/detect", params={"url": original}).json()["detected"] is False

    def test_translate_requires_url(self, client):
        assert client.get("/api/akamai/translate").status_code == 422


class TestCompatHeader:
    """with_compat_header 测试"""

    def test_added_when_detected(self):
        response = akamai_routes.with_compat_header(JSONResponse({}), True)
        assert response.headers["X-Akamai-Compatibility"] == "Enabled"

    def test_not_added(self):
        response = akamai_routes.with_compat_header(JSONResponse({}), False)
        assert "X-Akamai-Compatibility" not in response.headers

    def test_merge_replaces_existing(self):
        response = JSONResponse({}, headers={"Cache-Control": "no-cache"})
        merged = akamai_routes.merge_headers(response, {"Cache-Control": "max-age=60"})
        assert merged.headers["Cache-Control"] == "max-age=60"


# ============================================
# 2. /api/dimensions
# ============================================

class TestDimensionRoutes:
    """/api/dimensions 测试"""

    def test_get_cached(self, client):
        dimension_routes.dimension_cache.set("/a/b.jpg", DimensionsRecord(width=100, height=50))

        response = client.get("/api/dimensions", params={"key": "https://host/a/b.jpg?x=1"})
        data = response.json()

        assert response.status_code == 200
        assert data["key"] == "/a/b.jpg"
        assert data["aspect_ratio"] == 2.0

    def test_get_missing(self, client):
        response = client.get("/api/dimensions", params={"key": "/missing.jpg"})
        assert response.status_code == 404

    def test_stats_and_clear(self, client):
        dimension_routes.dimension_cache.set("/a.jpg", DimensionsRecord(width=1, height=1))

        stats = client.get("/api/dimensions/stats").json()
        assert stats["total_entries"] == 1

        cleared = client.post("/api/dimensions/clear").json()
        assert cleared["deleted_count"] == 1
        assert client.get("/api/dimensions/stats").json()["total_entries"] == 0

    def test_fetch(self, client, monkeypatch):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"original": {"width": 1200, "height": 800}})
        )
        fetcher = DimensionFetcher(
            cache=dimension_routes.dimension_cache,
            client=httpx.AsyncClient(transport=transport),
        )
        monkeypatch.setattr(dimension_routes, "dimension_fetcher", fetcher)

        response = client.get("/api/dimensions/fetch", params={"url": "https://images.example.com/hero.jpg"})

        assert response.status_code == 200
        assert response.json()["aspect_ratio"] == 1.5
        assert dimension_routes.dimension_cache.get("/hero.jpg") is not None

    def test_fetch_failure(self, client, monkeypatch):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        fetcher = DimensionFetcher(
            cache=dimension_routes.dimension_cache,
            client=httpx.AsyncClient(transport=transport),
        )
        monkeypatch.setattr(dimension_routes, "dimension_fetcher", fetcher)

        response = client.get("/api/dimensions/fetch", params={"url": "https://images.example.com/hero.jpg"})

        assert response.status_code == 502


# ============================================
# 3. /api/formats
# ============================================

class TestFormatRoutes:
    """/api/formats 测试"""

    def test_support(self, client):
        response = client.get("/api/formats/support", params={
            "format": "webp", "browser": "Safari", "version": "14",
        })
        data = response.json()

        assert data["supported"] is True
        assert data["browser"] == "safari"
        assert data["best_format"] == "webp"

    def test_not_supported(self, client):
        response = client.get("/api/formats/support", params={
            "format": "avif", "browser": "safari", "version": "13",
        })
        data = response.json()

        assert data["supported"] is False
        assert data["best_format"] is None
