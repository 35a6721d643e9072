"""
Database connection descriptor

Resolved once at startup from DB_* environment variables and passed explicitly
to whatever opens the connection.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote as url_quote

from core.logger import get_logger

logger = get_logger(__name__)

# Environment variable -> (descriptor field, default)
ENV_DEFAULTS = {
    "DB_HOST": ("host", "localhost"),
    "DB_PORT": ("port", "5432"),
    "DB_USER": ("user", "gotasker"),
    "DB_PASSWORD": ("password", "password"),
    "DB_NAME": ("name", "gotasker_db"),
    "DB_SSL_MODE": ("ssl_mode", "disable"),
}

DSN_TEMPLATE = "postgres://{user}:{password}@{host}:{port}/{name}?sslmode={ssl_mode}"


@dataclass(frozen=True)
class DatabaseConfig:
    """Parameters needed to address and authenticate to the database"""

    host: str = "localhost"
    port: str = "5432"
    user: str = "gotasker"
    password: str = "password"
    name: str = "gotasker_db"
    ssl_mode: str = "disable"

    def render(self, quote: bool = False) -> str:
        """Format the descriptor as a postgres:// connection URI

        Values are inserted as-is unless quote is set, in which case the
        user, password and database name are percent-encoded.
        """
        user, password, name = self.user, self.password, self.name
        if quote:
            user = url_quote(user, safe="")
            password = url_quote(password, safe="")
            name = url_quote(name, safe="")

        return DSN_TEMPLATE.format(
            user=user,
            password=password,
            host=self.host,
            port=self.port,
            name=name,
            ssl_mode=self.ssl_mode,
        )

    def masked(self) -> str:
        """Connection URI safe for logs"""
        return DSN_TEMPLATE.format(
            user=self.user,
            password="***",
            host=self.host,
            port=self.port,
            name=self.name,
            ssl_mode=self.ssl_mode,
        )


def resolve(environ: Optional[Mapping[str, str]] = None) -> DatabaseConfig:
    """Build a DatabaseConfig from the environment

    Unset or empty variables fall back to their defaults. Never raises.

    Args:
        environ: Mapping to read from, defaults to os.environ
    """
    env = os.environ if environ is None else environ
    values = {}

    for var_name, (field_name, default) in ENV_DEFAULTS.items():
        value = env.get(var_name, "")
        if value == "":
            # Informational only
            if var_name != "DB_PASSWORD":
                logger.debug(f"{var_name} not set, using default: {default}")
            else:
                logger.debug(f"{var_name} not set, using default")
            value = default
        values[field_name] = value

    return DatabaseConfig(**values)
