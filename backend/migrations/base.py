"""
Migration scripts and the directory source they are loaded from

Each script is a file directly inside the migrations directory named:
    <version>_<description>.up.sql
    <version>_<description>.down.sql
    <version>_<description>.sql        (treated as an up script)

Where <version> is an unsigned integer (e.g. 000001, 20240101120000).
Other *.sql files are ignored.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from core.errors import MigrationDirectoryReadError, MigrationDriverInitError
from core.logger import get_logger

logger = get_logger(__name__)

SCRIPT_NAME_PATTERN = re.compile(r"^(\d+)_(.*?)(?:\.(up|down))?\.sql$")


@dataclass(frozen=True)
class MigrationScript:
    """A single versioned SQL change unit"""

    version: int
    description: str
    path: Path
    direction: str = "up"

    def read(self) -> str:
        """Read the script body"""
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise MigrationDirectoryReadError(
                f"failed to read migration {self.path}: {e}"
            ) from e

    def __repr__(self) -> str:
        return f"<Migration {self.version}: {self.description}>"


def parse_script_name(path: Path):
    """Parse a script file name, returns None for names that don't match"""
    match = SCRIPT_NAME_PATTERN.match(path.name)
    if not match:
        return None
    version, description, direction = match.groups()
    return MigrationScript(
        version=int(version),
        description=description.replace("_", " "),
        path=path,
        direction=direction or "up",
    )


def list_sql_files(directory: Path) -> List[Path]:
    """List *.sql files directly inside directory

    A missing directory is treated as empty.
    """
    if not directory.exists():
        return []

    try:
        return sorted(p for p in directory.glob("*.sql") if p.is_file())
    except OSError as e:
        raise MigrationDirectoryReadError(
            f"failed to check migration files in {directory}: {e}"
        ) from e


class MigrationSource:
    """Up scripts of a migrations directory, ordered by version"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.migrations: Dict[int, MigrationScript] = {}

    def load(self) -> "MigrationSource":
        for path in list_sql_files(self.directory):
            script = parse_script_name(path)
            if script is None:
                logger.debug(f"Ignoring file with unrecognized name: {path.name}")
                continue
            if script.direction != "up":
                continue

            existing = self.migrations.get(script.version)
            if existing is not None:
                raise MigrationDriverInitError(
                    f"duplicate migration version {script.version}: "
                    f"{existing.path.name} and {path.name}"
                )

            self.migrations[script.version] = script
            logger.debug(f"Discovered migration: {script.version} - {script.description}")

        return self

    def ordered(self) -> List[MigrationScript]:
        return [self.migrations[v] for v in sorted(self.migrations)]

    def pending(self, current_version=None) -> List[MigrationScript]:
        """Scripts with a version greater than current_version (all if None)"""
        return [
            m for m in self.ordered()
            if current_version is None or m.version > current_version
        ]

    def __len__(self) -> int:
        return len(self.migrations)
