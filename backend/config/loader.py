"""
Configuration loader
Supports loading configuration from TOML and YAML files, with environment variable override support
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import toml
import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GOTASKER_CONFIG"

# Match ${VAR_NAME} or ${VAR_NAME:default_value} format
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


class ConfigLoader:
    """Configuration loader class

    Configuration hierarchy (later overrides earlier):
    1. Project default config (backend/config/config.toml)
    2. Override file (constructor argument or $GOTASKER_CONFIG), TOML or YAML
    """

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or os.getenv(CONFIG_ENV_VAR) or None
        self._config: Dict[str, Any] = {}

    def load(self) -> Dict[str, Any]:
        """Load and merge configuration"""
        project_config = self._load_project_config()

        if not self.config_file:
            self._config = project_config
            return self._config

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_content = f.read()

            # Replace environment variables
            config_content = self._replace_env_vars(config_content)

            # Choose parser based on file extension
            if config_path.suffix == ".toml":
                override_config = toml.loads(config_content)
            else:
                # Default to YAML parser
                override_config = yaml.safe_load(config_content) or {}

            self._config = self._merge_configs(project_config, override_config)

            logger.debug(f"✓ Configuration file loaded successfully: {config_path}")
            return self._config

        except (yaml.YAMLError, toml.TomlDecodeError) as e:
            logger.error(f"Configuration file parsing error: {e}")
            raise

    def _load_project_config(self) -> Dict[str, Any]:
        """Load project default configuration from backend/config/config.toml

        Returns:
            Project configuration dictionary, or empty dict if file doesn't exist
        """
        project_config_file = Path(__file__).parent / "config.toml"

        if not project_config_file.exists():
            logger.debug(f"Project config file not found: {project_config_file}")
            return {}

        with open(project_config_file, "r", encoding="utf-8") as f:
            config_content = f.read()

        project_config = toml.loads(self._replace_env_vars(config_content))
        logger.debug(f"✓ Project config loaded: {project_config_file}")
        return project_config

    def _merge_configs(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries

        Args:
            base: Base configuration (project defaults)
            override: Override configuration

        Returns:
            Merged configuration dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                # Recursively merge nested dictionaries
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _replace_env_vars(self, content: str) -> str:
        """Replace environment variable placeholders"""

        def replace_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) else ""
            return os.getenv(var_name) or default_value

        return _ENV_PATTERN.sub(replace_var, content)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value, supports dot-separated nested keys"""
        keys = key.split(".")
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default


def load_config(config_file: Optional[str] = None) -> ConfigLoader:
    """Convenience function: create a loader and load it"""
    loader = ConfigLoader(config_file)
    loader.load()
    return loader
