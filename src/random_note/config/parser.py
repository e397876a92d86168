"""
Settings persistence for Advanced Random Note.

This module loads and saves the plugin settings file. Settings are stored as
JSON (the host's data file) or YAML; since YAML is a superset of JSON a single
loader reads both. Missing keys are filled from the defaults, and a missing
file yields the default settings.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from ..models.settings import DEFAULT_SETTINGS, Settings


logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "random_note"


@dataclass
class SettingsLoadResult:
    """
    Result of a settings load.

    Attributes:
        settings: The parsed and validated settings
        warnings: Non-fatal problems found while loading
        settings_path: Path of the file that was read
        is_default: Whether the default settings were used
    """
    settings: Settings
    warnings: List[str]
    settings_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when the settings file cannot be read, parsed or validated."""
    pass


class SettingsStore:
    """
    Load/save lifecycle for the plugin settings.

    Settings are loaded once at startup and saved after every mutation.
    """

    DEFAULT_FILE_NAME = 'data.json'

    def __init__(self, settings_path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            settings_path: Settings file, or a plugin directory containing
                ``data.json``
        """
        settings_path = Path(settings_path).expanduser()
        if settings_path.is_dir():
            settings_path = settings_path / self.DEFAULT_FILE_NAME
        self.settings_path = settings_path
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load(self) -> SettingsLoadResult:
        """
        Load the settings file, or defaults when it does not exist.

        Returns:
            SettingsLoadResult with the validated settings

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        if not self.settings_path.exists():
            self.logger.info(f"No settings file at {self.settings_path}, using defaults")
            return SettingsLoadResult(
                settings=Settings.from_dict(DEFAULT_SETTINGS),
                warnings=["No settings file found, using default settings"],
                settings_path=None,
                is_default=True
            )

        data = self._load_file(self.settings_path)
        warnings = self._get_warnings(data)

        try:
            settings = Settings.from_dict(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings in {self.settings_path}: {e}") from e

        self.logger.info(f"Settings loaded from {self.settings_path} ({len(settings.queries)} queries)")
        return SettingsLoadResult(
            settings=settings,
            warnings=warnings,
            settings_path=self.settings_path,
            is_default=False
        )

    def _load_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Read and parse a settings file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Settings file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)
            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Settings file must contain an object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid settings syntax in {file_path}: {e}") from e
        except (OSError, IOError) as e:
            raise ConfigurationError(f"Cannot read settings file {file_path}: {e}") from e

    def _get_warnings(self, data: Dict[str, Any]) -> List[str]:
        """Collect non-fatal problems in the raw settings data."""
        warnings = []

        known_keys = set(DEFAULT_SETTINGS) | set(Settings.model_fields)
        for key in sorted(set(data) - known_keys):
            warnings.append(f"Unknown setting ignored: {key}")

        default_query = data.get('defaultQuery')
        if isinstance(default_query, dict):
            default_query = default_query.get('id')
        if default_query:
            ids = {query.get('id') for query in data.get('queries') or [] if isinstance(query, dict)}
            if default_query not in ids:
                warnings.append(f"Default query {default_query} does not exist and was reset")

        for warning in warnings:
            self.logger.warning(warning)
        return warnings

    def save(self, settings: Settings) -> None:
        """
        Persist the settings.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            data = settings.to_dict()

            if self.settings_path.suffix.lower() in ('.yaml', '.yml'):
                content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
            else:
                content = json.dumps(data, indent=2)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                f.write(content)

            self.logger.debug(f"Settings saved to {self.settings_path}")

        except (OSError, IOError) as e:
            raise ConfigurationError(f"Cannot write settings file {self.settings_path}: {e}") from e


def load_settings(settings_path: Union[str, Path]) -> SettingsLoadResult:
    """
    Convenience function to load settings.

    Raises:
        ConfigurationError: If the settings are invalid
    """
    return SettingsStore(settings_path).load()


def save_settings(settings: Settings, settings_path: Union[str, Path]) -> None:
    """Convenience function to save settings."""
    SettingsStore(settings_path).save(settings)


def configure_logging(settings: Settings) -> None:
    """Set the package log level from the ``debug`` setting."""
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
