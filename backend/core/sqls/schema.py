"""
Database schema definitions owned by the application itself

Application tables (tasks) are created by the SQL migrations shipped in
the top-level migrations/ directory, not here.
"""

# Single-row migration record, same layout golang-migrate uses
CREATE_SCHEMA_MIGRATIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version BIGINT NOT NULL PRIMARY KEY,
        dirty BOOLEAN NOT NULL
    )
"""
