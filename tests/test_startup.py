import pytest

from config import load_config
from core.db import SqliteDriver, open_database
from core.errors import (
    ConfigurationError,
    ConnectionLivenessError,
    ConnectionOpenError,
    MigrationApplyError,
)
from core.startup import database_settings, resolve_migrations_dir, server_address, start_database

from conftest import SQLITE_TASKS_SCHEMA


class UnreachableDriver(SqliteDriver):
    def connect(self, config, timeout=None):
        raise OSError("connection refused")


class DeadConnectionDriver(SqliteDriver):
    def __init__(self):
        self.closed = []

    def ping(self, conn):
        raise OSError("server closed the connection")

    def close(self, conn):
        self.closed.append(conn)
        super().close(conn)


def test_open_failure_is_reported(sqlite_config):
    with pytest.raises(ConnectionOpenError) as excinfo:
        open_database(sqlite_config, UnreachableDriver())
    assert "connection refused" in str(excinfo.value)


def test_liveness_failure_closes_connection(sqlite_config):
    driver = DeadConnectionDriver()

    with pytest.raises(ConnectionLivenessError):
        open_database(sqlite_config, driver)
    assert len(driver.closed) == 1


def test_manager_closes_on_exit(sqlite_config):
    with open_database(sqlite_config, SqliteDriver()) as db:
        db.ping()
    assert db.closed


def test_resolve_migrations_dir_prefers_first_existing(tmp_path):
    container = tmp_path / "app" / "migrations"
    local = tmp_path / "migrations"
    local.mkdir()

    assert resolve_migrations_dir([str(container), str(local)]) == local

    container.mkdir(parents=True)
    assert resolve_migrations_dir([str(container), str(local)]) == container


def test_resolve_migrations_dir_falls_back_to_last(tmp_path):
    candidates = [str(tmp_path / "a"), str(tmp_path / "b")]
    assert resolve_migrations_dir(candidates) == tmp_path / "b"


@pytest.fixture
def startup_config(tmp_path, monkeypatch, make_migrations):
    def _make(files):
        directory = make_migrations(files)
        override = tmp_path / "gotasker.toml"
        override.write_text(
            '[database]\ndriver = "sqlite"\n\n'
            f'[migrations]\npaths = ["{tmp_path / "missing"}", "{directory}"]\n',
            encoding="utf-8",
        )
        monkeypatch.setenv("DB_NAME", str(tmp_path / "startup.db"))
        return load_config(str(override))

    return _make


def test_start_database_migrates(startup_config):
    config = startup_config({"000001_create_tasks_table.up.sql": SQLITE_TASKS_SCHEMA})

    with start_database(config) as db:
        assert db.tasks.create("after startup").id == 1


def test_start_database_closes_connection_on_migration_failure(startup_config, monkeypatch):
    config = startup_config({"1_broken.up.sql": "CREATE TABLE broken (;"})
    opened = []
    original = SqliteDriver.close

    def tracking_close(self, conn):
        opened.append(conn)
        original(self, conn)

    monkeypatch.setattr(SqliteDriver, "close", tracking_close)

    with pytest.raises(MigrationApplyError):
        start_database(config)
    assert len(opened) == 1


def write_config(tmp_path, body):
    path = tmp_path / "settings.toml"
    path.write_text(body, encoding="utf-8")
    return load_config(str(path))


def test_database_settings(tmp_path):
    driver, timeout = database_settings(
        write_config(tmp_path, '[database]\ndriver = "sqlite"\nconnect_timeout = "2.5"\n')
    )

    assert isinstance(driver, SqliteDriver)
    assert timeout == 2.5


def test_unknown_driver_is_a_startup_error(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        database_settings(write_config(tmp_path, '[database]\ndriver = "mysql"\n'))
    assert "mysql" in str(excinfo.value)


def test_malformed_timeout_is_a_startup_error(tmp_path):
    config = write_config(tmp_path, '[database]\ndriver = "sqlite"\nconnect_timeout = "soon"\n')
    with pytest.raises(ConfigurationError):
        database_settings(config)


def test_malformed_port_is_a_startup_error(tmp_path):
    with pytest.raises(ConfigurationError):
        server_address(write_config(tmp_path, '[server]\nport = "eighty"\n'))
