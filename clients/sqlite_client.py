"""
SQLite client exposing the same interface as PostgresClient.

Each call opens its own short-lived connection (the sqlite3 module is not
safe to share across threads), with a busy timeout so lock contention
surfaces as StorageUnavailableError rather than blocking forever.

Type handling is registered once at import:
- aware datetimes are stored as ISO-8601 UTC strings with microseconds, so
  lexical comparison in SQL matches chronological order
- TIMESTAMP / DATE / BOOLEAN declared columns are converted back on read
- Decimal is stored as text to avoid float rounding
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from clients.database import Transaction, convert_params
from core.exceptions import ConflictError, StorageUnavailableError
from utils.timezone import to_utc

logger = logging.getLogger(__name__)


def _adapt_datetime(value: datetime) -> str:
    return to_utc(value).isoformat(timespec="microseconds")


def _convert_timestamp(raw: bytes) -> datetime:
    value = datetime.fromisoformat(raw.decode())
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


sqlite3.register_adapter(datetime, _adapt_datetime)
sqlite3.register_adapter(date, lambda value: value.isoformat())
sqlite3.register_adapter(Decimal, str)
sqlite3.register_converter("TIMESTAMP", _convert_timestamp)
sqlite3.register_converter("DATE", lambda raw: date.fromisoformat(raw.decode()))
sqlite3.register_converter("BOOLEAN", lambda raw: raw not in (b"0", b""))


@contextmanager
def _translate_errors():
    """Map sqlite3 failures onto the CRM exception taxonomy."""
    try:
        yield
    except sqlite3.IntegrityError as e:
        logger.warning("Integrity violation: %s", e)
        raise ConflictError(str(e)) from e
    except (sqlite3.OperationalError, sqlite3.DatabaseError) as e:
        logger.error("SQLite unavailable: %s", e)
        raise StorageUnavailableError() from e


def _to_qmark(query: str) -> str:
    return query.replace("%s", "?")


class SQLiteClient:
    """
    SQLite client for local development and tests.

    Usage:
        db = SQLiteClient("./data/crm.db")
        rows = db.execute("SELECT * FROM contacts WHERE city = %s", ("Austin",))
    """

    dialect = "sqlite"

    def __init__(self, path: str, timeout_seconds: int = 10):
        if path == ":memory:":
            raise ValueError("SQLiteClient needs a file path; each call opens a new connection")
        self._path = path
        self._timeout_seconds = timeout_seconds

    @contextmanager
    def get_connection(self):
        """Open a connection for one unit of work. Rolls back on error."""
        with _translate_errors():
            conn = sqlite3.connect(
                self._path,
                timeout=self._timeout_seconds,
                detect_types=sqlite3.PARSE_DECLTYPES,
            )
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _run(self, query: str, params: Tuple | Dict | None) -> List[Dict[str, Any]]:
        with _translate_errors():
            with self.get_connection() as conn:
                cur = conn.execute(_to_qmark(query), convert_params(params) or ())
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
                # Take the write lock up front so concurrent sign-ins serialize
                conn.execute("BEGIN IMMEDIATE")
                yield Transaction(conn.cursor(), placeholder="?")
                conn.commit()

    def close(self) -> None:
        """Connections are per call; nothing to release."""
