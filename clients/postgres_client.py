"""
PostgreSQL client with connection pooling and bounded timeouts.

Uses psycopg2 with ThreadedConnectionPool. Every connection is opened with a
connect timeout and a server-side statement_timeout, so a stalled database
surfaces as StorageUnavailableError instead of a hung request.

Driver exceptions never escape this module: connection and timeout failures
become StorageUnavailableError, constraint violations become ConflictError.
The original driver message is logged (redacted by the logging filter).
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Tuple

import psycopg2
import psycopg2.extras
import psycopg2.pool

from clients.database import Transaction, convert_params
from core.exceptions import ConflictError, StorageUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors():
    """Map psycopg2 failures onto the CRM exception taxonomy."""
    try:
        yield
    except psycopg2.IntegrityError as e:
        logger.warning("Integrity violation: %s", e)
        raise ConflictError(getattr(e.diag, "constraint_name", None) or "constraint violation") from e
    except (psycopg2.OperationalError, psycopg2.InterfaceError, psycopg2.pool.PoolError) as e:
        logger.error("PostgreSQL unavailable: %s", e)
        raise StorageUnavailableError() from e


class PostgresClient:
    """
    PostgreSQL client.

    Usage:
        db = PostgresClient(database_url)
        rows = db.execute("SELECT * FROM contacts WHERE city = %s", ("Austin",))

        with db.transaction() as tx:
            tx.execute("UPDATE auth_sessions SET is_active = false WHERE user_id = %s", (user_id,))
            tx.execute("INSERT INTO auth_sessions (...) VALUES (...)", (...))
    """

    dialect = "postgresql"

    # Class-level connection pools shared across instances
    _connection_pools: Dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
    _pools_lock = threading.RLock()

    def __init__(self, database_url: str, timeout_seconds: int = 10):
        self._database_url = database_url
        self._timeout_seconds = timeout_seconds
        self._ensure_connection_pool()

    def _ensure_connection_pool(self) -> None:
        """Create connection pool if it doesn't exist."""
        with self._pools_lock:
            if self._database_url not in self._connection_pools:
                with _translate_errors():
                    pool = psycopg2.pool.ThreadedConnectionPool(
                        minconn=2,
                        maxconn=20,
                        dsn=self._database_url,
                        connect_timeout=self._timeout_seconds,
                        options=f"-c statement_timeout={self._timeout_seconds * 1000}",
                    )
                self._connection_pools[self._database_url] = pool
                logger.info("Connection pool created")

    @contextmanager
    def get_connection(self):
        """Borrow a pooled connection. Rolls back on error before returning it."""
        if self._database_url not in self._connection_pools:
            self._ensure_connection_pool()

        pool = self._connection_pools[self._database_url]
        conn = None

        try:
            with _translate_errors():
                conn = pool.getconn()
            if conn is None:
                raise StorageUnavailableError()
            yield conn
        except Exception:
            if conn is not None and not conn.closed:
                conn.rollback()
            raise
        finally:
            if conn is not None:
                pool.putconn(conn)

    def _run(self, query: str, params: Tuple | Dict | None) -> List[Dict[str, Any]]:
        with _translate_errors():
            with self.get_connection() as conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute(query, convert_params(params))
                    rows = [dict(row) for row in cur.fetchall()] if cur.description else []
                conn.commit()
                return rows

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute query, return list of row dicts. Empty list if no results."""
        return self._run(query, params)

    def execute_single(self, query: str, params: Tuple | Dict | None = None) -> Dict[str, Any] | None:
        """Execute query, return first row or None."""
        results = self._run(query, params)
        return results[0] if results else None

    def execute_scalar(self, query: str, params: Tuple | Dict | None = None) -> Any:
        """Execute query, return first value of first row or None."""
        row = self.execute_single(query, params)
        return next(iter(row.values())) if row else None

    def execute_returning(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute INSERT/UPDATE with RETURNING, return results."""
        return self._run(query, params)

    @contextmanager
    def transaction(self):
        """Run several statements atomically. Commits on clean exit, rolls back otherwise."""
        with _translate_errors():
            with self.get_connection() as conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    yield Transaction(cur)
                conn.commit()

    def close(self) -> None:
        """Close connection pool."""
        with self._pools_lock:
            if self._database_url in self._connection_pools:
                self._connection_pools[self._database_url].closeall()
                del self._connection_pools[self._database_url]
