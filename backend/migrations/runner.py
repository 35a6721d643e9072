"""
Migration runner - Manages database schema versioning

Responsibilities:
1. Create schema_migrations table if not exists
2. Discover all migration scripts in a directory
3. Determine which migrations need to run
4. Execute migrations in order, one transaction per script
5. Record the applied version and the dirty flag
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from core.db.drivers import DatabaseDriver
from core.errors import MigrationApplyError, MigrationDriverInitError
from core.logger import get_logger
from core.sqls import queries, schema

from .base import MigrationScript, MigrationSource, list_sql_files

logger = get_logger(__name__)

# Version passed to force() to clear the migration record
NIL_VERSION = -1


class SchemaState(str, Enum):
    NO_VERSION = "no_version"
    CLEAN = "clean"
    DIRTY = "dirty"


@dataclass(frozen=True)
class MigrationStatus:
    """Outcome of a migration run or a version lookup

    version is None when no migration has ever been recorded.
    skipped is set when the migrations directory held no scripts at all.
    """

    version: Optional[int] = None
    dirty: bool = False
    applied: int = 0
    skipped: bool = False

    @property
    def state(self) -> SchemaState:
        if self.version is None:
            return SchemaState.NO_VERSION
        if self.dirty:
            return SchemaState.DIRTY
        return SchemaState.CLEAN


class MigrationRunner:
    """
    Database migration runner with version tracking

    Usage:
        runner = MigrationRunner(driver)
        status = runner.apply_all(conn, Path("migrations"))
    """

    def __init__(self, driver: DatabaseDriver):
        self.driver = driver

    def _ensure_schema_migrations_table(self, conn: Any) -> None:
        self.driver.execute(conn, schema.CREATE_SCHEMA_MIGRATIONS_TABLE)
        logger.debug("✓ schema_migrations table ready")

    def _get_version(self, conn: Any) -> MigrationStatus:
        row = self.driver.fetch_one(conn, queries.SELECT_MIGRATION_VERSION)
        if row is None:
            return MigrationStatus()
        return MigrationStatus(version=int(row["version"]), dirty=bool(row["dirty"]))

    def _set_version(self, conn: Any, version: int, dirty: bool) -> None:
        with self.driver.transaction(conn):
            self.driver.execute(conn, queries.DELETE_MIGRATION_VERSION)
            if version >= 0:
                self.driver.execute(
                    conn, queries.INSERT_MIGRATION_VERSION, (version, dirty)
                )

    def _attach(self, conn: Any) -> None:
        """Create the tracking table and take the migration lock"""
        try:
            self._ensure_schema_migrations_table(conn)
            self.driver.lock(conn)
        except Exception as e:
            raise MigrationDriverInitError(f"failed to create migration driver: {e}") from e

    def _detach(self, conn: Any) -> None:
        try:
            self.driver.unlock(conn)
        except Exception as e:
            logger.warning(f"Failed to release migration lock: {e}")

    def _apply(self, conn: Any, migration: MigrationScript) -> None:
        sql = migration.read()

        logger.info(f"Running migration {migration.version}: {migration.description}")

        # Mark dirty before touching the schema, clean only after the script commits
        self._set_version(conn, migration.version, dirty=True)
        try:
            if sql.strip():
                self.driver.run_script(conn, sql)
        except Exception as e:
            logger.error(f"✗ Migration {migration.version} failed: {e}")
            raise MigrationApplyError(
                migration.version,
                f"failed to run migrations: migration {migration.version} "
                f"({migration.path.name}) failed: {e}",
            ) from e
        self._set_version(conn, migration.version, dirty=False)

        logger.info(f"✓ Migration {migration.version} completed successfully")

    def apply_all(self, conn: Any, migrations_dir: Path) -> MigrationStatus:
        """
        Apply every pending migration in migrations_dir

        Args:
            conn: Open database connection
            migrations_dir: Directory holding the *.sql scripts

        Returns:
            Status read back after the run

        Raises:
            MigrationDirectoryReadError: directory or script unreadable
            MigrationDriverInitError: tracking table, lock or source failed
            MigrationApplyError: a script failed; the schema is now dirty
        """
        migrations_dir = Path(migrations_dir)

        if not list_sql_files(migrations_dir):
            logger.info(
                f"No migration files found in {migrations_dir}, skipping migrations"
            )
            return MigrationStatus(skipped=True)

        source = MigrationSource(migrations_dir).load()

        self._attach(conn)
        try:
            current = self._get_version(conn)

            if current.dirty:
                logger.warning(
                    f"Database is in dirty state at version {current.version}, "
                    "skipping migrations until it is fixed manually"
                )
                return current

            pending = source.pending(current.version)
            if not pending:
                logger.info("✓ All migrations up to date")
            else:
                logger.info(f"Found {len(pending)} pending migration(s)")

            for migration in pending:
                self._apply(conn, migration)

            status = self._get_version(conn)
        finally:
            self._detach(conn)

        status = MigrationStatus(
            version=status.version, dirty=status.dirty, applied=len(pending)
        )

        if status.dirty:
            logger.warning(f"Database is in dirty state at version {status.version}")
        elif status.version is not None:
            logger.info(f"Migrations completed. Current version: {status.version}")
        else:
            logger.info("No migrations applied yet")

        return status

    def version(self, conn: Any) -> MigrationStatus:
        """Read the recorded version without applying anything"""
        try:
            self._ensure_schema_migrations_table(conn)
        except Exception as e:
            raise MigrationDriverInitError(f"failed to create migration driver: {e}") from e
        return self._get_version(conn)

    def force(self, conn: Any, version: int) -> MigrationStatus:
        """
        Record version as applied and clean, without running anything

        This is the manual way out of a dirty state once the schema has been
        repaired by hand. NIL_VERSION clears the record entirely.
        """
        if version < NIL_VERSION:
            raise ValueError(f"invalid version {version}")

        self._attach(conn)
        try:
            self._set_version(conn, version, dirty=False)
        finally:
            self._detach(conn)

        logger.info(f"✓ Forced migration version to {version}")
        return self._get_version(conn)


def apply_all(driver: DatabaseDriver, conn: Any, migrations_dir: Path) -> MigrationStatus:
    """Convenience wrapper around MigrationRunner.apply_all"""
    return MigrationRunner(driver).apply_all(conn, migrations_dir)


__all__ = [
    "MigrationRunner",
    "MigrationStatus",
    "NIL_VERSION",
    "SchemaState",
    "apply_all",
]
