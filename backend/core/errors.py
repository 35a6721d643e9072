"""
Error types

Startup errors are fatal: the process logs them and exits with a non-zero status.
Task errors are mapped to HTTP status codes by the API layer.
"""

from typing import Optional


class GoTaskerError(Exception):
    """Base class for all application errors"""


# ==================== Startup ====================


class StartupError(GoTaskerError):
    """Fatal error raised while bringing the service up"""

    step = "startup"


class ConfigurationError(StartupError):
    """A configuration value is unknown or malformed"""

    step = "load configuration"


class ConnectionOpenError(StartupError):
    """The database connection could not be opened"""

    step = "open database connection"


class ConnectionLivenessError(StartupError):
    """The connection was opened but the round-trip check failed"""

    step = "verify database connection"


class MigrationError(StartupError):
    """Base class for migration failures"""

    step = "run migrations"


class MigrationDirectoryReadError(MigrationError):
    """The migrations directory or one of its scripts could not be read"""


class MigrationDriverInitError(MigrationError):
    """The tracking table, lock or migration source could not be initialized"""


class MigrationApplyError(MigrationError):
    """A migration script failed; the schema is left dirty at its version"""

    def __init__(self, version: int, message: Optional[str] = None):
        self.version = version
        super().__init__(message or f"migration {version} failed")


# ==================== Tasks ====================


class TaskNotFoundError(GoTaskerError):
    """No task exists with the requested id"""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class TaskValidationError(GoTaskerError):
    """Task input failed validation"""
