"""
Config Loader - Load and merge configuration from multiple sources.

Reads an optional YAML file and ``.env`` file, lets pydantic-settings pick up
``AUTO_WIZ__*`` environment variables, then applies explicit overrides.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from auto_wiz.config.settings import Settings
from auto_wiz.exceptions import ConfigurationError

CONFIG_PATH_ENV = "AUTO_WIZ_CONFIG"


class ConfigLoader:
    """
    Configuration loader that merges settings from multiple sources.

    Priority order (highest to lowest):
    1. Explicit overrides passed to load()
    2. Environment variables
    3. Config file (explicit path, then $AUTO_WIZ_CONFIG, then defaults)
    4. Default values
    """

    DEFAULT_CONFIG_PATHS = [
        Path("auto-wiz.yaml"),
        Path("auto-wiz.yml"),
        Path("config/auto-wiz.yaml"),
        Path.home() / ".config" / "auto-wiz" / "config.yaml",
    ]

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self.config_path = Path(config_path) if config_path else None
        self._file_config: Dict[str, Any] = {}

    def find_config_file(self) -> Optional[Path]:
        """Return the first config file that exists, or None."""
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigurationError(
                    f"Config file not found: {self.config_path}",
                    {"path": str(self.config_path)},
                )
            return self.config_path

        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path and Path(env_path).exists():
            return Path(env_path)

        for path in self.DEFAULT_CONFIG_PATHS:
            if path.exists():
                return path

        return None

    def load_yaml_config(self, path: Path) -> Dict[str, Any]:
        """
        Load configuration from a YAML file.

        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping
        """
        try:
            with open(path, "r") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", {"path": str(path)})

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping at the top level",
                {"path": str(path)},
            )
        return config

    def load(
        self,
        env_file: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Settings:
        """
        Load settings from all sources.

        Args:
            env_file: Optional path to .env file
            overrides: Optional dictionary of values to override

        Returns:
            Complete Settings instance
        """
        if env_file:
            load_dotenv(env_file)
        else:
            for env_path in [Path(".env"), Path(".env.local")]:
                if env_path.exists():
                    load_dotenv(env_path)
                    break

        config_file = self.find_config_file()
        if config_file:
            self._file_config = self.load_yaml_config(config_file)

        settings = Settings(**self._file_config)

        if overrides:
            settings = settings.merge_with(overrides)

        return settings


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> Settings:
    """
    Convenience function to load configuration.

    Example:
        >>> settings = load_config()
        >>> settings = load_config(config_path="replay.yaml")
        >>> settings = load_config(replay={"stop_on_error": False})
    """
    loader = ConfigLoader(config_path)
    return loader.load(env_file=env_file, overrides=overrides if overrides else None)
