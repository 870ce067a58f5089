"""Resolves the effective search settings for a project."""

import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any, Mapping

from .config_storage import ConfigStorage
from .config_validator import SettingsValidator
from .search_settings import SearchSettings, parse_file_size

logger = logging.getLogger(__name__)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Environment variable -> (settings field, converter)
ENV_OVERRIDES: Dict[str, tuple] = {
    'QUICKFIND_MAX_RESULTS': ('max_results', int),
    'QUICKFIND_MAX_FILE_SIZE': ('max_file_size', parse_file_size),
    'QUICKFIND_CASE_SENSITIVE': ('case_sensitive', _parse_bool),
    'QUICKFIND_WHOLE_WORD': ('whole_word', _parse_bool),
    'QUICKFIND_CONTEXT_SIZE': ('context_size', int),
    'QUICKFIND_MAX_DEPTH': ('max_depth', int),
    'QUICKFIND_INCLUDE_HIDDEN': ('include_hidden', _parse_bool),
}


class ConfigurationService:
    """High-level settings API: defaults, then settings file, then environment."""

    def __init__(self, base_path: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration service.

        Args:
            base_path: Directory holding ``.quickfind/settings.json`` (defaults to cwd)
            environ: Environment mapping to read overrides from (defaults to os.environ)
        """
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.storage = ConfigStorage(str(self.base_path))
        self.validator = SettingsValidator()
        self.environ = environ if environ is not None else os.environ
        self._settings: Optional[SearchSettings] = None

    def get_settings(self) -> SearchSettings:
        """
        Get the effective settings, loading them on first use.

        Returns:
            Validated SearchSettings

        Raises:
            ValueError: If the effective settings are invalid
        """
        if self._settings is None:
            self._settings = self._load()
        return self._settings

    def reload(self) -> SearchSettings:
        """Drop cached settings and load them again."""
        self._settings = None
        return self.get_settings()

    def _load(self) -> SearchSettings:
        values: Dict[str, Any] = {}

        stored = self.storage.load_raw()
        if stored:
            logger.info(f"Loaded settings from {self.storage.get_config_path()}")
            values.update(stored)

        values.update(self._environment_overrides())

        settings = SearchSettings.from_dict(values)
        is_valid, errors = self.validator.validate_settings(settings)
        if not is_valid:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")
        return settings

    def _environment_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        for env_name, (field_name, convert) in ENV_OVERRIDES.items():
            raw = self.environ.get(env_name)
            if raw is None or raw == '':
                continue
            try:
                overrides[field_name] = convert(raw)
            except ValueError:
                logger.warning(f"Ignoring {env_name}={raw!r}: not a valid value")
        return overrides
