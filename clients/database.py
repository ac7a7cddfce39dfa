"""
Database URL handling and SQL client construction.

Two engines are supported behind one client interface:
- PostgreSQL (psycopg2 pool) for deployed environments
- SQLite (file database) for local development and tests

SQL is written once in psycopg2 "format" paramstyle (%s); the SQLite client
rewrites placeholders. Both clients also accept the same DATABASE_URL that
the SQLAlchemy engine is built from, so the ORM store and the raw SQL store
always point at the same database.
"""

from typing import Any, Dict, List, Protocol, Tuple
from uuid import UUID

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


class SQLClient(Protocol):
    """Operations shared by PostgresClient and SQLiteClient."""

    dialect: str

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]: ...

    def execute_single(self, query: str, params: Tuple | Dict | None = None) -> Dict[str, Any] | None: ...

    def execute_scalar(self, query: str, params: Tuple | Dict | None = None) -> Any: ...

    def execute_returning(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]: ...

    def transaction(self): ...

    def close(self) -> None: ...


def convert_params(params: Tuple | Dict | None) -> Tuple | Dict | None:
    """Convert UUID objects to strings, recursively."""
    if params is None:
        return None

    def convert(value: Any) -> Any:
        if isinstance(value, UUID):
            return str(value)
        if isinstance(value, list):
            return [convert(v) for v in value]
        if isinstance(value, tuple):
            return tuple(convert(v) for v in value)
        if isinstance(value, dict):
            return {k: convert(v) for k, v in value.items()}
        return value

    return convert(params)


class Transaction:
    """Cursor wrapper handed out by client.transaction(). No commit per statement."""

    def __init__(self, cursor, placeholder: str = "%s"):
        self._cursor = cursor
        self._placeholder = placeholder

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        if self._placeholder != "%s":
            query = query.replace("%s", self._placeholder)
        self._cursor.execute(query, convert_params(params) or ())
        if self._cursor.description:
            return [dict(row) for row in self._cursor.fetchall()]
        return []

    def execute_returning(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        return self.execute(query, params)


def normalize_database_url(url: str) -> str:
    """
    Canonical SQLAlchemy-style URL.

    Accepts the forms seen in deployment configs:
    - file:./data/crm.db      (Prisma-style SQLite path)
    - sqlite:///./data/crm.db
    - postgres://...          (Heroku-style)
    - postgresql://...
    """
    if url.startswith("file:"):
        return "sqlite:///" + url[len("file:"):]
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def is_sqlite_url(url: str) -> bool:
    return normalize_database_url(url).startswith("sqlite")


def sqlite_path(url: str) -> str:
    """Filesystem path of a SQLite URL."""
    url = normalize_database_url(url)
    if "://" not in url:
        raise ValueError(f"Not a SQLite URL: {url}")
    path = url.split("://", 1)[1]
    if path.startswith("/"):
        path = path[1:]
    return path or ":memory:"


def create_sql_client(database_url: str, timeout_seconds: int = 10) -> SQLClient:
    """Build the raw SQL client for a database URL."""
    url = normalize_database_url(database_url)
    if url.startswith("sqlite"):
        from clients.sqlite_client import SQLiteClient

        return SQLiteClient(sqlite_path(url), timeout_seconds=timeout_seconds)
    if url.startswith("postgresql"):
        from clients.postgres_client import PostgresClient

        # psycopg2 does not understand driver-qualified schemes
        return PostgresClient(url.replace("postgresql+psycopg2://", "postgresql://"), timeout_seconds=timeout_seconds)
    raise ValueError(f"Unsupported database URL scheme: {url.split(':', 1)[0]}")


def create_orm_engine(database_url: str, timeout_seconds: int = 10) -> Engine:
    """Build the SQLAlchemy engine for the same database the SQL client uses."""
    url = normalize_database_url(database_url)
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"timeout": timeout_seconds, "check_same_thread": False},
            pool_pre_ping=True,
        )
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url[len("postgresql://"):]
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=timeout_seconds,
        pool_pre_ping=True,
        connect_args={
            "connect_timeout": timeout_seconds,
            "options": f"-c statement_timeout={timeout_seconds * 1000}",
        },
    )

