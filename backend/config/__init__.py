"""
Configuration package

- loader: TOML/YAML project configuration with ${VAR:default} substitution
- database: connection descriptor resolved from DB_* environment variables
"""

from .database import DatabaseConfig, resolve
from .loader import ConfigLoader, load_config

__all__ = ["ConfigLoader", "DatabaseConfig", "load_config", "resolve"]
