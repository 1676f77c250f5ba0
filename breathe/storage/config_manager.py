"""
Manages loading, validation and saving of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from breathe.exceptions import ConfigurationError
from breathe.models.config import AppConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> AppConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.
        A missing file means all defaults apply.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated AppConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing configuration file: {e}") from e
            config_from_file = self._get_config_as_dict()
        else:
            log.debug(f"No config file at '{self.config_file_path}', using defaults.")

        if cli_options:
            config_from_file.update(cli_options)

        try:
            return AppConfig(**config_from_file)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_config(self, settings: dict[str, Any]) -> None:
        """
        Writes a complete configuration file, filling unspecified keys with defaults.

        Args:
            settings: A dictionary of settings to save.
        """
        try:
            merged = AppConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

        config = configparser.ConfigParser()
        config["DEFAULT"] = {}
        for key in sorted(AppConfig.get_ini_keys()):
            value = getattr(merged, key)
            if isinstance(value, list):
                config["DEFAULT"][key] = ",".join(map(str, value))
            else:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        result: dict[str, Any] = {}
        try:
            if "cache_version" in section:
                result["cache_version"] = section.get("cache_version")
            if "origin" in section:
                result["origin"] = section.get("origin")
            if "precache_urls" in section:
                result["precache_urls"] = [
                    u.strip()
                    for u in section.get("precache_urls", "").split(",")
                    if u.strip()
                ]
            if "network_timeout" in section:
                result["network_timeout"] = section.getfloat("network_timeout")
            if "sample_interval_ms" in section:
                result["sample_interval_ms"] = section.getint("sample_interval_ms")
            if "default_phase_duration" in section:
                result["default_phase_duration"] = section.getfloat(
                    "default_phase_duration"
                )
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e
        return result
