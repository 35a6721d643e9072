"""Shared fixtures: SQLite-backed databases and migration directories."""

import pytest

from config.database import DatabaseConfig
from core.db import SqliteDriver, open_database

SQLITE_TASKS_SCHEMA = """
CREATE TABLE tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    completed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


@pytest.fixture
def driver():
    return SqliteDriver()


@pytest.fixture
def sqlite_config(tmp_path):
    return DatabaseConfig(name=str(tmp_path / "gotasker.db"))


@pytest.fixture
def db(sqlite_config, driver):
    with open_database(sqlite_config, driver) as manager:
        yield manager


@pytest.fixture
def make_migrations(tmp_path):
    """Write {file name: sql} into a fresh directory and return its path"""

    def _make(files, name="migrations"):
        directory = tmp_path / name
        directory.mkdir(exist_ok=True)
        for file_name, sql in files.items():
            (directory / file_name).write_text(sql, encoding="utf-8")
        return directory

    return _make


@pytest.fixture
def migrated_db(db, make_migrations):
    directory = make_migrations({"000001_create_tasks_table.up.sql": SQLITE_TASKS_SCHEMA})
    db.migrate(directory)
    return db
