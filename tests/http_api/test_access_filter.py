# tests/http_api/test_access_filter.py
from datetime import timedelta

from catalog_http_api.db.models import Role
from catalog_http_api.logging.middleware import REQUEST_ID_HEADER
from catalog_http_api.security.access_filter import extract_bearer_token
from catalog_http_api.security.tokens import TokenCodec, utcnow


class TestBearerExtraction:
    def test_extracts_token(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert extract_bearer_token("bearer abc") == "abc"

    def test_other_schemes_and_empty_values(self):
        assert extract_bearer_token(None) is None
        assert extract_bearer_token("Basic dXNlcjpwYXNz") is None
        assert extract_bearer_token("Bearer   ") is None


class TestAuthentication:
    def test_missing_token_is_401(self, client):
        resp = client.get("/api/products")

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"
        body = resp.json()
        assert body["status"] == 401
        assert body["error"] == "Unauthorized"
        assert body["path"] == "/api/products"
        assert "timestamp" in body

    def test_garbage_token_is_401(self, client):
        resp = client.get("/api/products", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token"

    def test_expired_token_is_401(self, client, app, user):
        past = utcnow() - timedelta(days=2)
        token = TokenCodec(app.state.settings.JWT_SECRET, clock=lambda: past).issue(user.email, user.id, user.role)

        resp = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token"

    def test_token_signed_with_other_key_is_401(self, client, user):
        token = TokenCodec("another-signing-secret-that-is-long-enough-too").issue(user.email, user.id, Role.ADMIN)

        resp = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 401

    def test_stale_token_does_not_block_login(self, client, user):
        resp = client.post(
            "/api/auth/login",
            json={"email": "user@example.com", "password": "secret123"},
            headers={"Authorization": "Bearer stale.garbage.token"},
        )

        assert resp.status_code == 200

    def test_health_is_public(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_docs_are_public(self, client):
        assert client.get("/openapi.json").status_code == 200


class TestRequestContext:
    def test_request_id_is_generated(self, client):
        resp = client.get("/health")

        assert resp.headers[REQUEST_ID_HEADER]

    def test_request_id_is_echoed(self, client):
        resp = client.get("/health", headers={REQUEST_ID_HEADER: "req-123"})

        assert resp.headers[REQUEST_ID_HEADER] == "req-123"

    def test_rejected_requests_carry_request_id(self, client):
        resp = client.get("/api/products", headers={REQUEST_ID_HEADER: "req-401"})

        assert resp.status_code == 401
        assert resp.headers[REQUEST_ID_HEADER] == "req-401"


class TestCors:
    def test_preflight_from_allowed_origin(self, client):
        resp = client.options(
            "/api/products",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Authorization",
            },
        )

        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_preflight_from_unknown_origin_is_refused(self, client):
        resp = client.options(
            "/api/products",
            headers={"Origin": "http://evil.example", "Access-Control-Request-Method": "GET"},
        )

        assert resp.status_code == 400
