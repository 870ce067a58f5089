"""Loading of the search settings file."""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ConfigStorage:
    """Reads ``.quickfind/settings.json`` under a base directory."""

    CONFIG_FILENAME = "settings.json"
    CONFIG_DIR = ".quickfind"

    def __init__(self, base_path: Optional[str] = None):
        """Initialize configuration storage."""
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.config_dir = self.base_path / self.CONFIG_DIR
        self.config_file = self.config_dir / self.CONFIG_FILENAME

    def load_raw(self) -> Optional[Dict[str, Any]]:
        """
        Load the settings file as a dictionary.

        Returns:
            Parsed settings if the file exists and holds a JSON object, None otherwise
        """
        if not self.config_file.exists():
            return None

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # Log error but don't crash
            logger.warning(f"Failed to load settings from {self.config_file}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {self.config_file}: expected a JSON object")
            return None

        return data

    def get_config_path(self) -> Path:
        """Get path to the settings file."""
        return self.config_file
