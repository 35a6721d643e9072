"""
Migration command line

    gotasker-migrate up            apply pending migrations
    gotasker-migrate version       print the recorded version
    gotasker-migrate force N       mark version N clean (use -1 to clear)

Connection settings come from the same DB_* environment variables the
server uses.
"""

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv

from config import load_config
from config.database import resolve
from core.db import open_database
from core.errors import StartupError
from core.logger import get_logger, setup_logging
from core.startup import database_settings, resolve_migrations_dir

from .runner import MigrationRunner, MigrationStatus

logger = get_logger(__name__)


def _format_status(status: MigrationStatus) -> str:
    if status.skipped:
        return "skipped (no migration files)"
    if status.version is None:
        return "no version"
    return f"{status.version}{' (dirty)' if status.dirty else ''}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gotasker-migrate", description=__doc__.split("\n\n")[0])
    parser.add_argument(
        "--path",
        help="Migrations directory (default: first existing of the configured paths)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("up", help="Apply all pending migrations")
    subparsers.add_parser("version", help="Print the current migration version")
    force = subparsers.add_parser("force", help="Set the version without running migrations")
    force.add_argument("version", type=int)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    config = load_config()
    setup_logging(config.get("logging"))

    try:
        driver, timeout = database_settings(config)
        runner = MigrationRunner(driver)
        with open_database(resolve(), driver, timeout=timeout) as db:
            if args.command == "up":
                path = args.path or resolve_migrations_dir(config.get("migrations.paths"))
                status = runner.apply_all(db.conn, path)
            elif args.command == "version":
                status = runner.version(db.conn)
            else:
                status = runner.force(db.conn, args.version)
    except StartupError as e:
        logger.critical(f"✗ Failed to {e.step}: {e}")
        return 1

    print(_format_status(status))
    return 0


if __name__ == "__main__":
    sys.exit(main())
