# tests/conftest.py
from decimal import Decimal
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from catalog_http_api.config import AppEnv, Settings
from catalog_http_api.db.models import Base, Role, User
from catalog_http_api.db.session import build_engine, build_session_factory, db_session
from catalog_http_api.main import create_app
from catalog_http_api.repositories.products import ProductsRepository
from catalog_http_api.repositories.users import UsersRepository
from catalog_http_api.security.passwords import PasswordHasher
from catalog_http_api.security.tokens import TokenCodec, utcnow

TEST_SECRET = "test-signing-secret-that-is-comfortably-longer-than-32-bytes"
TEST_PASSWORD = "secret123"


# ---------------------------------------------------------------------------
# Core (no HTTP)
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    """A fresh in-memory database with all tables created."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    factory = build_session_factory(engine)
    session = factory()
    yield session
    session.close()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_SECRET)


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast.
    return PasswordHasher(rounds=4)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        APP_ENV=AppEnv.TESTING,
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_SECRET,
        BCRYPT_ROUNDS=4,
        SEED_DEMO_DATA=False,
        LOG_LEVEL="WARNING",
        CORS_ALLOWED_ORIGINS="http://localhost:3000",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient with the lifespan running (tables are created on entry)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(app, client):
    """Insert an identity directly into the app's database."""

    def _make(email: str, password: str = TEST_PASSWORD, role: Role = Role.USER) -> User:
        with db_session(app.state.session_factory) as session:
            user = UsersRepository(session).create(
                email=email,
                password_hash=app.state.password_hasher.hash(password),
                role=role,
                created_at=utcnow(),
            )
        return user

    return _make


@pytest.fixture
def make_product(app, client):
    """Insert a product directly into the app's database and return its id."""

    def _make(
        name: str = "Widget",
        price: str = "9.99",
        stock_quantity: int = 5,
        category: str = "Tools",
        description: str = "A useful widget",
    ) -> int:
        with db_session(app.state.session_factory) as session:
            product = ProductsRepository(session).create(
                name=name,
                description=description,
                price=Decimal(price),
                category=category,
                stock_quantity=stock_quantity,
                created_at=utcnow(),
            )
            product_id = product.id
        return product_id

    return _make


@pytest.fixture
def headers_for(app):
    """Build an Authorization header carrying a freshly issued token for `user`."""

    def _headers(user: User) -> Dict[str, str]:
        token = app.state.token_codec.issue(user.email, user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin(make_user) -> User:
    return make_user("admin@example.com", role=Role.ADMIN)


@pytest.fixture
def user(make_user) -> User:
    return make_user("user@example.com", role=Role.USER)


@pytest.fixture
def admin_headers(headers_for, admin) -> Dict[str, str]:
    return headers_for(admin)


@pytest.fixture
def user_headers(headers_for, user) -> Dict[str, str]:
    return headers_for(user)
