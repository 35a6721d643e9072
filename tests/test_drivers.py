from types import SimpleNamespace

import pytest

from config.database import DatabaseConfig
from core.db import PostgresDriver, SqliteDriver, get_driver
from core.db.drivers import strip_transaction


def test_get_driver_by_name():
    assert isinstance(get_driver("postgres"), PostgresDriver)
    assert isinstance(get_driver("SQLite"), SqliteDriver)


def test_get_driver_unknown():
    with pytest.raises(ValueError):
        get_driver("mysql")


def test_postgres_adapts_placeholders():
    assert PostgresDriver().adapt("SELECT * FROM tasks WHERE id = ?") == (
        "SELECT * FROM tasks WHERE id = %s"
    )
    assert SqliteDriver().adapt("WHERE id = ?") == "WHERE id = ?"


def test_advisory_lock_id_is_stable_32_bit():
    driver = PostgresDriver()
    conn = SimpleNamespace(info=SimpleNamespace(dbname="gotasker_db"))

    lock_id = driver.lock_id(conn)

    assert lock_id == driver.lock_id(conn)
    assert 0 <= lock_id <= 0xFFFFFFFF
    other = SimpleNamespace(info=SimpleNamespace(dbname="other_db"))
    assert driver.lock_id(other) != lock_id


def test_sqlite_script_is_atomic(tmp_path):
    driver = SqliteDriver()
    conn = driver.connect(DatabaseConfig(name=str(tmp_path / "atomic.db")))
    try:
        with pytest.raises(Exception):
            driver.run_script(conn, "CREATE TABLE t (id INTEGER);\nINSERT INTO nope VALUES (1);")

        rows = driver.fetch_all(conn, "SELECT name FROM sqlite_master WHERE name = ?", ("t",))
        assert rows == []
        assert not conn.in_transaction
    finally:
        driver.close(conn)


def test_sqlite_transaction_rolls_back(tmp_path):
    driver = SqliteDriver()
    conn = driver.connect(DatabaseConfig(name=str(tmp_path / "tx.db")))
    try:
        driver.execute(conn, "CREATE TABLE t (id INTEGER)")
        with pytest.raises(RuntimeError):
            with driver.transaction(conn):
                driver.execute(conn, "INSERT INTO t (id) VALUES (?)", (1,))
                raise RuntimeError("boom")

        assert driver.fetch_all(conn, "SELECT id FROM t") == []
    finally:
        driver.close(conn)


@pytest.mark.parametrize(
    "script",
    [
        "BEGIN;\nCREATE TABLE t (id INTEGER);\nCOMMIT;\n",
        "-- wrapped\nbegin transaction;\nCREATE TABLE t (id INTEGER);\ncommit;",
        "START TRANSACTION;\nCREATE TABLE t (id INTEGER);\nEND;\n-- done\n",
    ],
)
def test_strip_transaction_removes_own_wrapper(script):
    assert strip_transaction(script).strip() == "CREATE TABLE t (id INTEGER);"


def test_strip_transaction_keeps_unwrapped_scripts():
    script = "CREATE TABLE t (id INTEGER);\nCOMMIT;"
    assert strip_transaction(script) == script

    half_wrapped = "BEGIN;\nCREATE TABLE t (id INTEGER);"
    assert strip_transaction(half_wrapped) == half_wrapped


def test_sqlite_script_with_own_transaction(tmp_path):
    driver = SqliteDriver()
    conn = driver.connect(DatabaseConfig(name=str(tmp_path / "own_tx.db")))
    try:
        driver.run_script(conn, "BEGIN;\nCREATE TABLE t (id INTEGER);\nCOMMIT;\n")

        rows = driver.fetch_all(conn, "SELECT name FROM sqlite_master WHERE name = ?", ("t",))
        assert len(rows) == 1
        assert not conn.in_transaction
    finally:
        driver.close(conn)


def test_sqlite_script_with_own_transaction_stays_atomic(tmp_path):
    driver = SqliteDriver()
    conn = driver.connect(DatabaseConfig(name=str(tmp_path / "own_tx_fail.db")))
    try:
        with pytest.raises(Exception):
            driver.run_script(
                conn,
                "BEGIN;\nCREATE TABLE t (id INTEGER);\nINSERT INTO nope VALUES (1);\nCOMMIT;\n",
            )

        rows = driver.fetch_all(conn, "SELECT name FROM sqlite_master WHERE name = ?", ("t",))
        assert rows == []
    finally:
        driver.close(conn)
