"""
Startup procedure

open connection -> verify liveness -> run migrations. Any StartupError raised
here is fatal; the caller logs it and exits without serving.
"""

from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple

from config import ConfigLoader
from config.database import resolve
from core.db import DEFAULT_CONNECT_TIMEOUT, DatabaseManager, get_driver, open_database
from core.db.drivers import DatabaseDriver
from core.errors import ConfigurationError
from core.logger import get_logger
from migrations import MigrationStatus

logger = get_logger(__name__)

DEFAULT_MIGRATION_PATHS = ("/app/migrations", "migrations")


def resolve_migrations_dir(candidates: Optional[Sequence[str]] = None) -> Path:
    """Return the first existing candidate directory

    Falls back to the last candidate, which then counts as empty and makes
    the migration step a no-op.
    """
    paths = list(candidates or DEFAULT_MIGRATION_PATHS)
    for candidate in paths:
        path = Path(candidate)
        if path.is_dir():
            logger.debug(f"Using migrations directory: {path}")
            return path
    return Path(paths[-1])


def database_settings(config: ConfigLoader) -> Tuple[DatabaseDriver, float]:
    """Driver and connect timeout from the [database] section

    Raises:
        ConfigurationError: unknown driver or malformed timeout
    """
    try:
        driver = get_driver(str(config.get("database.driver", "postgres")))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    raw_timeout = config.get("database.connect_timeout", DEFAULT_CONNECT_TIMEOUT)
    try:
        timeout = float(raw_timeout)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"invalid database.connect_timeout: {raw_timeout!r}"
        ) from e

    return driver, timeout


def server_address(config: ConfigLoader) -> Tuple[str, int]:
    """Host and port from the [server] section

    Raises:
        ConfigurationError: malformed port
    """
    host = str(config.get("server.host", "0.0.0.0"))
    raw_port = config.get("server.port", 8080)
    try:
        port = int(raw_port)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid server port: {raw_port!r}") from e
    return host, port


def start_database(
    config: ConfigLoader,
    environ: Optional[Mapping[str, str]] = None,
) -> DatabaseManager:
    """Open, verify and migrate the database

    The connection is closed again if migrating fails.

    Returns:
        A DatabaseManager ready to serve requests
    """
    db_config = resolve(environ)
    driver, timeout = database_settings(config)

    logger.info(f"Connecting to {db_config.masked()}")
    db = open_database(db_config, driver, timeout=timeout)

    try:
        migrations_dir = resolve_migrations_dir(config.get("migrations.paths"))
        status = db.migrate(migrations_dir)
        _log_status(status)
    except BaseException:
        db.close()
        raise

    return db


def _log_status(status: MigrationStatus) -> None:
    if status.skipped:
        return
    logger.debug(
        f"Schema state: {status.state.value} "
        f"(version={status.version}, applied={status.applied})"
    )
