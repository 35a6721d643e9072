"""
Database drivers

A driver is chosen explicitly and passed to whatever opens a connection;
nothing registers itself on import. All SQL in the application is written
with "?" placeholders and adapted by the driver.
"""

import re
import sqlite3
import zlib
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import psycopg
from psycopg.rows import dict_row

from config.database import DatabaseConfig
from core.logger import get_logger

logger = get_logger(__name__)

# Same salt golang-migrate uses for its advisory lock ids
ADVISORY_LOCK_SALT = 1486364155

_LEADING_BEGIN = re.compile(
    r"\A(?:\s|--[^\n]*\n)*(?:BEGIN(?:\s+(?:TRANSACTION|WORK))?|START\s+TRANSACTION)\s*;",
    re.IGNORECASE,
)
_TRAILING_COMMIT = re.compile(
    r"(?<!\w)(?:COMMIT|END)(?:\s+(?:TRANSACTION|WORK))?\s*;?(?:\s|--[^\n]*(?:\n|\Z))*\Z",
    re.IGNORECASE,
)


def strip_transaction(sql: str) -> str:
    """Remove a script's own BEGIN ... COMMIT wrapper

    Drivers wrap every script in one transaction, so a script that opens and
    commits its own must not do it a second time. Only a matching pair is removed.
    """
    begin = _LEADING_BEGIN.match(sql)
    if begin is None:
        return sql
    body = sql[begin.end():]
    commit = _TRAILING_COMMIT.search(body)
    if commit is None:
        return sql
    return body[:commit.start()]


class DatabaseDriver:
    """Base driver: SQL dialect helpers shared by all backends"""

    name = "base"
    placeholder = "?"

    def connect(self, config: DatabaseConfig, timeout: Optional[float] = None) -> Any:
        raise NotImplementedError

    def adapt(self, query: str) -> str:
        """Rewrite "?" placeholders into this driver's paramstyle"""
        if self.placeholder == "?":
            return query
        return query.replace("?", self.placeholder)

    def ping(self, conn: Any) -> None:
        """Round-trip check, raises if the connection is unusable"""
        self.fetch_one(conn, "SELECT 1 AS ok")

    def _run(self, conn: Any, query: str, params: Sequence[Any]) -> Any:
        if params:
            return conn.execute(self.adapt(query), tuple(params))
        return conn.execute(query)

    def execute(self, conn: Any, query: str, params: Sequence[Any] = ()) -> None:
        self._run(conn, query, params)

    def fetch_all(
        self, conn: Any, query: str, params: Sequence[Any] = ()
    ) -> List[Dict[str, Any]]:
        cursor = self._run(conn, query, params)
        return [dict(row) for row in cursor.fetchall()]

    def fetch_one(
        self, conn: Any, query: str, params: Sequence[Any] = ()
    ) -> Optional[Dict[str, Any]]:
        # fetchall so DML with RETURNING is fully stepped before returning
        rows = self._run(conn, query, params).fetchall()
        return dict(rows[0]) if rows else None

    def transaction(self, conn: Any):
        raise NotImplementedError

    def run_script(self, conn: Any, sql: str) -> None:
        """Execute a multi-statement script as one atomic unit"""
        raise NotImplementedError

    def lock(self, conn: Any) -> None:
        """Acquire the migration lock (no-op by default)"""

    def unlock(self, conn: Any) -> None:
        """Release the migration lock (no-op by default)"""

    def close(self, conn: Any) -> None:
        conn.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class PostgresDriver(DatabaseDriver):
    """PostgreSQL via psycopg 3

    Connections run in autocommit mode; multi-statement work goes through
    transaction() or run_script().
    """

    name = "postgres"
    placeholder = "%s"

    def connect(self, config: DatabaseConfig, timeout: Optional[float] = None) -> Any:
        kwargs: Dict[str, Any] = {"autocommit": True, "row_factory": dict_row}
        if timeout:
            kwargs["connect_timeout"] = max(1, int(timeout))
        return psycopg.connect(config.render(quote=True), **kwargs)

    @contextmanager
    def transaction(self, conn: Any) -> Iterator[Any]:
        with conn.transaction():
            yield conn

    def run_script(self, conn: Any, sql: str) -> None:
        # No parameters: psycopg sends the script as a simple query
        with conn.transaction():
            conn.execute(strip_transaction(sql))

    def lock_id(self, conn: Any) -> int:
        database_name = conn.info.dbname or ""
        checksum = zlib.crc32(database_name.encode("utf-8"))
        return (checksum * ADVISORY_LOCK_SALT) & 0xFFFFFFFF

    def lock(self, conn: Any) -> None:
        conn.execute("SELECT pg_advisory_lock(%s)", (self.lock_id(conn),))

    def unlock(self, conn: Any) -> None:
        conn.execute("SELECT pg_advisory_unlock(%s)", (self.lock_id(conn),))


class SqliteDriver(DatabaseDriver):
    """SQLite via the standard library, for local runs and tests

    The descriptor's database name is used as the file path (":memory:" works).
    """

    name = "sqlite"

    def connect(self, config: DatabaseConfig, timeout: Optional[float] = None) -> Any:
        conn = sqlite3.connect(
            config.name,
            timeout=timeout or 5.0,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def transaction(self, conn: Any) -> Iterator[Any]:
        conn.execute("BEGIN")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def run_script(self, conn: Any, sql: str) -> None:
        try:
            conn.executescript(f"BEGIN;\n{strip_transaction(sql)}\n;COMMIT;")
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise


DRIVERS = {
    PostgresDriver.name: PostgresDriver,
    SqliteDriver.name: SqliteDriver,
}


def get_driver(name: str) -> DatabaseDriver:
    """Instantiate a driver by name ("postgres" or "sqlite")"""
    try:
        return DRIVERS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown database driver: {name!r} (expected one of {sorted(DRIVERS)})"
        ) from None
