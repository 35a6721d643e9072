"""
Database query SQL statements
Contains all SELECT, INSERT, UPDATE, DELETE statements
"""

# Migration record queries
SELECT_MIGRATION_VERSION = """
    SELECT version, dirty FROM schema_migrations
    LIMIT 1
"""

DELETE_MIGRATION_VERSION = """
    DELETE FROM schema_migrations
"""

INSERT_MIGRATION_VERSION = """
    INSERT INTO schema_migrations (version, dirty)
    VALUES (?, ?)
"""

# Tasks queries
INSERT_TASK = """
    INSERT INTO tasks (title, description, created_at, updated_at)
    VALUES (?, ?, ?, ?)
    RETURNING id, title, description, completed_at, created_at, updated_at
"""

SELECT_TASK_BY_ID = """
    SELECT id, title, description, completed_at, created_at, updated_at
    FROM tasks
    WHERE id = ?
"""

SELECT_TASKS = """
    SELECT id, title, description, completed_at, created_at, updated_at
    FROM tasks
    ORDER BY id
"""

UPDATE_TASK = """
    UPDATE tasks
    SET title = ?, description = ?, updated_at = ?
    WHERE id = ?
    RETURNING id, title, description, completed_at, created_at, updated_at
"""

UPDATE_TASK_COMPLETION = """
    UPDATE tasks
    SET completed_at = ?, updated_at = ?
    WHERE id = ?
    RETURNING id, title, description, completed_at, created_at, updated_at
"""

DELETE_TASK = """
    DELETE FROM tasks
    WHERE id = ?
    RETURNING id
"""
