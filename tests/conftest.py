"""Shared test fixtures for the SalesCRM test suite."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

# Reset vault client singleton so each run resolves secrets from scratch
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from auth.config import AuthConfig
from clients.schema import init_schema
from clients.sqlite_client import SQLiteClient
from utils.user_context import Identity, clear_current_identity, identity_context


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

# Primary test user - use for single-user tests
TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "testuser@example.com"

# Administrator - use for admin route tests
TEST_ADMIN_ID = UUID("00000000-0000-0000-0000-000000000002")
TEST_ADMIN_EMAIL = "admin@example.com"

# Fixed "now" for anything that takes a clock
FIXED_NOW = datetime(2025, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


# =============================================================================
# IDENTITY FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_identity():
    """Ensure clean identity context before and after each test."""
    clear_current_identity()
    yield
    clear_current_identity()


@pytest.fixture
def test_user_id() -> UUID:
    return TEST_USER_ID


@pytest.fixture
def test_identity() -> Identity:
    return Identity(user_id=TEST_USER_ID, email=TEST_USER_EMAIL, role="user")


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(user_id=TEST_ADMIN_ID, email=TEST_ADMIN_EMAIL, role="admin")


@pytest.fixture
def authenticated_context(test_identity):
    """Run the test as the primary test user."""
    with identity_context(test_identity):
        yield test_identity


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "crm-test.db")


@pytest.fixture
def db_url(db_path) -> str:
    return f"sqlite:///{db_path}"


@pytest.fixture
def db(db_path):
    """Fresh SQLite database with the full schema, one per test."""
    client = SQLiteClient(db_path, timeout_seconds=5)
    init_schema(client)
    yield client
    client.close()


# =============================================================================
# CONFIG / CLOCK FIXTURES
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def auth_config() -> AuthConfig:
    """Production defaults except a cheap bcrypt cost."""
    return AuthConfig(bcrypt_rounds=4)


# =============================================================================
# APP FIXTURES
# =============================================================================


@pytest.fixture
def app_settings(db_url, auth_config):
    from api.settings import AppSettings

    return AppSettings(
        app_env="test",
        database_url=db_url,
        db_timeout_seconds=5,
        jwt_secret="test-signing-key-0123456789abcdef",
        auth=auth_config,
    )


@pytest.fixture
def app_services(app_settings, clock):
    from api.app import build_services

    services = build_services(app_settings, clock=clock)
    yield services
    services.close()


@pytest.fixture
def app(app_settings, app_services):
    """The real application over a temporary SQLite database."""
    from api.app import create_app

    return create_app(app_settings, services=app_services)


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    from starlette.testclient import TestClient

    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def sign_up(client):
    """Register an account through the API; returns (user json, token)."""

    def _sign_up(email="bob@example.com", password="correct horse battery", display_name="Bob"):
        response = client.post(
            "/api/auth/signup",
            json={"email": email, "password": password, "displayName": display_name},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], data["token"]

    return _sign_up


@pytest.fixture
def auth_headers(sign_up):
    """Bearer header for a freshly registered standard user."""
    _, token = sign_up()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(sign_up):
    """Bearer header for a freshly registered administrator."""
    _, token = sign_up(email="admin@example.com", display_name="Admin")
    return {"Authorization": f"Bearer {token}"}
