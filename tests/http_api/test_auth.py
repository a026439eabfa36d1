# tests/http_api/test_auth.py
from catalog_http_api.db.models import Role

CREDENTIALS = {"email": "alice@example.com", "password": "secret123"}


class TestRegister:
    def test_register_returns_token_for_new_user(self, client, app):
        resp = client.post("/api/auth/register", json=CREDENTIALS)

        assert resp.status_code == 201
        body = resp.json()
        assert body["tokenType"] == "Bearer"
        assert body["email"] == "alice@example.com"
        assert body["role"] == "USER"
        assert isinstance(body["userId"], int)
        assert app.state.token_codec.verify(body["token"]).role is Role.USER

    def test_requested_role_is_ignored(self, client):
        resp = client.post("/api/auth/register", json={**CREDENTIALS, "role": "ADMIN"})

        assert resp.status_code == 201
        assert resp.json()["role"] == "USER"

    def test_duplicate_email_is_rejected(self, client):
        client.post("/api/auth/register", json=CREDENTIALS)
        resp = client.post("/api/auth/register", json=CREDENTIALS)

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Conflict"
        assert body["message"] == "User with this email already exists"

    def test_invalid_email_is_rejected(self, client):
        resp = client.post("/api/auth/register", json={"email": "not-an-email", "password": "secret123"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation failed"
        assert "email" in resp.json()["message"]

    def test_blank_password_is_rejected(self, client):
        resp = client.post("/api/auth/register", json={"email": "alice@example.com", "password": "   "})

        assert resp.status_code == 400
        assert "password" in resp.json()["message"]

    def test_overlong_password_is_rejected(self, client):
        resp = client.post("/api/auth/register", json={"email": "alice@example.com", "password": "x" * 73})

        assert resp.status_code == 400
        assert "password" in resp.json()["message"]


class TestLogin:
    def test_login_after_register(self, client, app):
        client.post("/api/auth/register", json=CREDENTIALS)

        resp = client.post("/api/auth/login", json=CREDENTIALS)

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Authentication successful"
        claims = app.state.token_codec.verify(body["token"])
        assert claims.subject == "alice@example.com"
        assert claims.user_id == body["userId"]

    def test_admin_login_carries_admin_role(self, client, admin):
        resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "secret123"})

        assert resp.status_code == 200
        assert resp.json()["role"] == "ADMIN"

    def test_wrong_password_and_unknown_email_look_the_same(self, client, user):
        wrong = client.post("/api/auth/login", json={"email": "user@example.com", "password": "nope"})
        unknown = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "nope"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"] == "Invalid email or password"
        assert wrong.json()["error"] == "Unauthorized"

    def test_missing_body_is_a_validation_error(self, client):
        resp = client.post("/api/auth/login")

        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation failed"

    def test_login_token_opens_protected_routes(self, client, user):
        token = client.post(
            "/api/auth/login", json={"email": "user@example.com", "password": "secret123"}
        ).json()["token"]

        resp = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 200
