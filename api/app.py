"""
FastAPI application factory.

Builds every service once and hands it to the routers and middleware that
need it. Nothing is a module-level singleton.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.base import dump, success_response
from api.crud import create_crud_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from api.reports import create_reports_router
from api.settings import AppSettings, load_settings
from auth.admin_api import create_admin_router
from auth.api import create_auth_router
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.store import build_credential_store
from auth.tokens import TokenSigner
from clients.database import SQLClient, create_sql_client, is_sqlite_url, sqlite_path
from clients.email_client import EmailGatewayClient
from clients.schema import init_schema
from clients.valkey_client import ValkeyClient
from core.audit import AuditLogger
from core.services.entity_service import EntityService
from core.services.registry import ENTITY_DEFINITIONS
from core.services.report_service import ReportService
from utils.logging_config import configure_logging
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Everything the routers depend on, plus what must be closed at shutdown."""

    sql_client: SQLClient
    auth_service: AuthService
    entity_services: dict[str, EntityService]
    report_service: ReportService
    valkey: ValkeyClient | None = None
    closables: list = field(default_factory=list)

    def close(self) -> None:
        for resource in self.closables:
            resource.close()


def build_services(settings: AppSettings, clock: Callable[[], datetime] = now_utc) -> AppServices:
    """Connect to the stores and wire the services together."""
    if is_sqlite_url(settings.database_url):
        Path(sqlite_path(settings.database_url)).parent.mkdir(parents=True, exist_ok=True)

    sql_client = create_sql_client(settings.database_url, timeout_seconds=settings.db_timeout_seconds)
    init_schema(sql_client)
    closables = [sql_client]

    valkey = None
    rate_limiter = None
    if settings.valkey_url:
        valkey = ValkeyClient(settings.valkey_url)
        rate_limiter = RateLimiter(valkey, settings.auth)
        closables.append(valkey)

    email_client = None
    if settings.email:
        email_client = EmailGatewayClient(
            gateway_url=settings.email.gateway_url,
            api_key=settings.email.api_key,
            hmac_secret=settings.email.hmac_secret,
        )

    auth_service = AuthService(
        config=settings.auth,
        store=build_credential_store(
            settings.database_url, sql_client, timeout_seconds=settings.db_timeout_seconds
        ),
        signer=TokenSigner(settings.jwt_secret, settings.auth.jwt_algorithm),
        security_logger=SecurityLogger(sql_client),
        rate_limiter=rate_limiter,
        email_client=email_client,
        clock=clock,
    )

    audit = AuditLogger(sql_client)
    entity_services = {
        segment: EntityService(sql_client, audit, definition)
        for segment, definition in ENTITY_DEFINITIONS.items()
    }

    return AppServices(
        sql_client=sql_client,
        auth_service=auth_service,
        entity_services=entity_services,
        report_service=ReportService(sql_client, clock=clock),
        valkey=valkey,
        closables=closables,
    )


def create_app(settings: AppSettings | None = None, services: AppServices | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Defaults to load_settings()
        services: Defaults to build_services(settings)
    """
    settings = settings or load_settings()
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("SalesCRM API starting (env=%s)", settings.app_env)
        yield
        services.close()
        logger.info("SalesCRM API stopped")

    app = FastAPI(title="SalesCRM API", version="1.0.0", lifespan=lifespan)
    app.state.services = services

    # Added innermost first: auth runs last, request IDs are assigned first
    app.add_middleware(
        AuthMiddleware,
        auth_service=services.auth_service,
        cookie_name=settings.auth.cookie_name,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    @app.get("/api/health", tags=["health"])
    def health():
        services.sql_client.execute_scalar("SELECT 1")
        return dump(success_response({"status": "healthy", "database": services.sql_client.dialect}))

    @app.get("/api/ping", tags=["health"])
    def ping():
        return dump(success_response({"message": "pong"}))

    app.include_router(create_auth_router(services.auth_service, settings.auth), prefix="/api/auth")
    app.include_router(create_admin_router(services.auth_service, services.report_service), prefix="/api/admin")
    app.include_router(create_reports_router(services.report_service), prefix="/api/reports")
    app.include_router(create_crud_router(services.entity_services), prefix="/api")

    return app


def app_from_env() -> FastAPI:
    """uvicorn factory: configure logging from the environment, then build the app."""
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    return create_app(settings)
