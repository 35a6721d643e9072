"""
Database migrations module - Version-based migration system

This module provides a versioned migration system that:
1. Tracks the applied version and a dirty flag in the schema_migrations table
2. Runs *.sql scripts from a directory in order by version number
3. Refuses to continue over a dirty schema until it is forced clean
"""

from .base import MigrationScript, MigrationSource
from .runner import NIL_VERSION, MigrationRunner, MigrationStatus, SchemaState, apply_all

__all__ = [
    "MigrationRunner",
    "MigrationScript",
    "MigrationSource",
    "MigrationStatus",
    "NIL_VERSION",
    "SchemaState",
    "apply_all",
]
