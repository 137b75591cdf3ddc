"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from segmerge.exceptions import ConfigurationError
from segmerge.models.config import SegmergeConfig
from segmerge.utils.path import create_dir

log = logging.getLogger(__name__)


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> SegmergeConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        A missing file is not an error: built-in defaults are used instead.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated SegmergeConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing configuration file: {e}") from e

            if self._migrate_if_needed():
                log.info("Configuration file was updated with new default values.")
            config_from_file = self._get_config_as_dict()
        else:
            log.debug(f"No configuration file at '{self.config_file_path}', using defaults.")

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return SegmergeConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any] | None = None) -> None:
        """
        Creates and saves a new configuration file with every known key.

        Args:
            settings: Values overriding the model defaults.
        """
        settings = settings or {}
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}
        defaults = SegmergeConfig()

        for key in sorted(SegmergeConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key))
            config["DEFAULT"][key] = self._to_ini(value)

        try:
            create_dir(self.config_file_path.parent)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, list):
            return ",".join(map(str, value))
        return str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        defaults = SegmergeConfig()
        try:
            return {
                "buffer_size": section.getint("buffer_size", defaults.buffer_size),
                "default_part_count": section.getint(
                    "default_part_count", defaults.default_part_count
                ),
                "atomic_merge": section.getboolean("atomic_merge", False),
                "external_storage_env": section.get(
                    "external_storage_env", defaults.external_storage_env
                ),
                "secondary_storage_env": section.get(
                    "secondary_storage_env", defaults.secondary_storage_env
                ),
                "emulated_storage_env": section.get(
                    "emulated_storage_env", defaults.emulated_storage_env
                ),
                "default_external_path": section.get(
                    "default_external_path", defaults.default_external_path
                ),
                "fallback_external_path": section.get(
                    "fallback_external_path", defaults.fallback_external_path
                ),
                "mount_table_path": section.get(
                    "mount_table_path", defaults.mount_table_path
                ),
                "vold_config_paths": _split_list(
                    section.get("vold_config_paths", ",".join(defaults.vold_config_paths))
                ),
                "block_device_prefixes": _split_list(
                    section.get(
                        "block_device_prefixes", ",".join(defaults.block_device_prefixes)
                    )
                ),
                "volume_paths": _split_list(section.get("volume_paths", "")),
                "probe_file_name": section.get(
                    "probe_file_name", defaults.probe_file_name
                ),
                "trust_writable_flag": section.getboolean("trust_writable_flag", False),
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = SegmergeConfig()
        needs_saving = False
        config_section = self._parser["DEFAULT"]

        for key in sorted(SegmergeConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
