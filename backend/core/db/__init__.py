"""
Database module - Repository pattern implementation

This module provides:
1. Explicitly selected drivers (PostgreSQL, SQLite)
2. open_database(): connect and verify the connection before anything uses it
3. DatabaseManager that owns the connection and aggregates all repositories
"""

import threading
from typing import Any, Optional

from config.database import DatabaseConfig
from core.errors import ConnectionLivenessError, ConnectionOpenError
from core.logger import get_logger

from .base import BaseRepository
from .drivers import DatabaseDriver, PostgresDriver, SqliteDriver, get_driver
from .tasks import TasksRepository

logger = get_logger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5.0


class DatabaseManager:
    """
    Owns one open connection and provides access to all repositories

    Use it as a context manager so the connection is closed on every exit path:

        with open_database(config, driver) as db:
            tasks = db.tasks.list_all()
    """

    def __init__(self, conn: Any, driver: DatabaseDriver):
        self.conn = conn
        self.driver = driver
        self.lock = threading.RLock()
        self._closed = False

        self.tasks = TasksRepository(conn, driver, self.lock)

    def ping(self) -> None:
        with self.lock:
            self.driver.ping(self.conn)

    def migrate(self, migrations_dir):
        """Apply pending migrations on this connection"""
        from migrations import MigrationRunner

        with self.lock:
            return MigrationRunner(self.driver).apply_all(self.conn, migrations_dir)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.driver.close(self.conn)
            logger.debug("✓ Database connection closed")
        except Exception as e:
            logger.warning(f"Failed to close database connection: {e}")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_database(
    config: DatabaseConfig,
    driver: DatabaseDriver,
    timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT,
) -> DatabaseManager:
    """
    Open a connection and verify it with a round-trip check

    Args:
        config: Resolved connection descriptor
        driver: Driver used to open and talk to the connection
        timeout: Seconds allowed for connecting

    Raises:
        ConnectionOpenError: the connection could not be opened
        ConnectionLivenessError: the round-trip check failed
    """
    try:
        conn = driver.connect(config, timeout=timeout)
    except Exception as e:
        raise ConnectionOpenError(f"failed to open database: {e}") from e

    try:
        driver.ping(conn)
    except Exception as e:
        try:
            driver.close(conn)
        except Exception as close_error:
            logger.debug(f"Closing unusable connection failed: {close_error}")
        raise ConnectionLivenessError(f"failed to ping database: {e}") from e

    logger.info(f"✓ Connected to database ({driver.name})")
    return DatabaseManager(conn, driver)


__all__ = [
    "BaseRepository",
    "DatabaseDriver",
    "DatabaseManager",
    "PostgresDriver",
    "SqliteDriver",
    "TasksRepository",
    "get_driver",
    "open_database",
]
