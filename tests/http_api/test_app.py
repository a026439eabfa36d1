# tests/http_api/test_app.py
import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from catalog_http_api.config import DEFAULT_JWT_SECRET, AppEnv, Settings
from catalog_http_api.db.seed import DEMO_PRODUCTS
from catalog_http_api.main import create_app


def _api_paths(app) -> set:
    return {r.path for r in app.routes if isinstance(r, APIRoute)}


def test_routers_are_mounted_under_api_prefix(app) -> None:
    paths = _api_paths(app)

    assert "/api/auth/login" in paths
    assert "/api/products/{product_id}/stock" in paths
    assert "/health" in paths


def test_auth_routes_are_tagged_auth(app) -> None:
    for route in app.routes:
        if isinstance(route, APIRoute) and route.path.startswith("/api/auth"):
            assert "auth" in route.tags, f"Route {route.path} is missing the 'auth' tag."


def test_custom_prefix(settings) -> None:
    app = create_app(settings.model_copy(update={"API_PREFIX": "/v2/"}))

    assert "/v2/products" in _api_paths(app)


def test_production_refuses_default_secret(settings) -> None:
    unsafe = settings.model_copy(update={"APP_ENV": AppEnv.PRODUCTION, "JWT_SECRET": DEFAULT_JWT_SECRET})

    with pytest.raises(RuntimeError):
        create_app(unsafe)


def test_production_starts_with_custom_secret(settings) -> None:
    app = create_app(settings.model_copy(update={"APP_ENV": AppEnv.PRODUCTION}))

    assert app.state.settings.APP_ENV is AppEnv.PRODUCTION


def test_docs_can_be_disabled(settings) -> None:
    app = create_app(settings.model_copy(update={"DOCS_ENABLED": False}))

    with TestClient(app) as client:
        # Public by policy, but not routed.
        assert client.get("/openapi.json").status_code == 404


class TestSeeding:
    @pytest.fixture
    def seeded_client(self, settings):
        app = create_app(settings.model_copy(update={"SEED_DEMO_DATA": True}))
        with TestClient(app) as client:
            yield client

    def test_demo_identities_can_log_in(self, seeded_client):
        admin = seeded_client.post("/api/auth/login", json={"email": "admin@example.com", "password": "admin123"})
        user = seeded_client.post("/api/auth/login", json={"email": "user@example.com", "password": "user123"})

        assert admin.json()["role"] == "ADMIN"
        assert user.json()["role"] == "USER"

    def test_demo_products_are_loaded(self, seeded_client):
        token = seeded_client.post(
            "/api/auth/login", json={"email": "user@example.com", "password": "user123"}
        ).json()["token"]

        page = seeded_client.get("/api/products", headers={"Authorization": f"Bearer {token}"}).json()

        assert page["totalElements"] == len(DEMO_PRODUCTS)


def test_settings_parse_cors_lists() -> None:
    settings = Settings(_env_file=None, CORS_ALLOWED_ORIGINS="http://a.test, http://b.test", API_PREFIX="api/")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.api_root == "/api"
    assert Settings(_env_file=None, CORS_ALLOWED_ORIGINS="*").cors_origins == ["*"]
