"""Auth test fixtures - real SQLite-backed stores, fixed clock, cheap bcrypt."""

from unittest.mock import Mock

import pytest

from auth.orm_store import OrmCredentialStore
from auth.security_logger import SecurityLogger
from auth.service import AuthService
from auth.sql_store import SqlCredentialStore
from auth.store import build_credential_store
from auth.tokens import TokenSigner
from clients.database import create_orm_engine
from clients.email_client import EmailGatewayClient

TEST_JWT_SECRET = "test-signing-key-0123456789abcdef"


@pytest.fixture
def signer() -> TokenSigner:
    return TokenSigner(TEST_JWT_SECRET)


@pytest.fixture
def security_logger(db) -> SecurityLogger:
    return SecurityLogger(db)


@pytest.fixture
def orm_store(db, db_url):
    engine = create_orm_engine(db_url, timeout_seconds=5)
    yield OrmCredentialStore(engine)
    engine.dispose()


@pytest.fixture
def sql_store(db) -> SqlCredentialStore:
    return SqlCredentialStore(db)


@pytest.fixture(params=["orm", "sql"])
def store(request, orm_store, sql_store):
    """Each CredentialStore implementation in turn."""
    return orm_store if request.param == "orm" else sql_store


@pytest.fixture
def mock_email_client():
    """Mock email client - no actual emails sent in tests."""
    return Mock(spec=EmailGatewayClient)


@pytest.fixture
def auth_service(db, db_url, auth_config, signer, security_logger, clock, mock_email_client):
    """AuthService over the same store stack the app builds."""
    return AuthService(
        config=auth_config,
        store=build_credential_store(db_url, db, timeout_seconds=5),
        signer=signer,
        security_logger=security_logger,
        email_client=mock_email_client,
        clock=clock,
    )


@pytest.fixture
def signed_up(auth_service):
    """A registered standard user and the AuthResult of their sign-up."""
    return auth_service.sign_up(
        email="bob@example.com",
        password="correct horse battery",
        display_name="Bob Builder",
        ip_address="10.0.0.5",
        user_agent="TestBrowser/1.0",
    )
