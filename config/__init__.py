"""Configuration management module for quickfind."""

from .search_options import SearchOptions
from .search_settings import (
    SearchSettings,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_TEXT_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE,
    parse_file_size
)
from .config_storage import ConfigStorage
from .config_validator import SettingsValidator
from .config_service import ConfigurationService

__all__ = [
    'SearchOptions',
    'SearchSettings',
    'DEFAULT_EXCLUDE_PATTERNS',
    'DEFAULT_TEXT_EXTENSIONS',
    'DEFAULT_MAX_FILE_SIZE',
    'parse_file_size',
    'ConfigStorage',
    'SettingsValidator',
    'ConfigurationService'
]
