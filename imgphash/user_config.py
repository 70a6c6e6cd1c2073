"""
User configuration management for imgphash.

Supports configuration from multiple sources (in order of priority):
1. Runtime parameters (highest priority)
2. Environment variables
3. User config file (~/.imgphash/config.json)
4. Default values from config.py (lowest priority)

Example config.json:
{
    "default_workers": 4,
    "default_threshold": 10,
    "max_image_pixels": 500000000
}
"""

import json
import os
from pathlib import Path
from typing import Any, Optional
import logging

from .config import (
    DEFAULT_THRESHOLD,
    DEFAULT_WORKERS,
    MAX_IMAGE_PIXELS,
)

logger = logging.getLogger(__name__)


class UserConfig:
    """
    Manages user configuration from file and environment variables.

    The config file is read lazily on first access and cached until reload().
    """

    _instance: Optional['UserConfig'] = None
    _config_data: Optional[dict] = None

    def __new__(cls):
        """Singleton pattern to ensure one config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory path."""
        env_dir = os.getenv('IMGPHASH_CONFIG_DIR')
        if env_dir:
            return Path(env_dir)
        return Path.home() / '.imgphash'

    @property
    def config_file_path(self) -> Path:
        """Get the configuration file path."""
        return self.config_dir / 'config.json'

    def _load_config_file(self) -> dict:
        """Load configuration from JSON file."""
        if not self.config_file_path.exists():
            return {}

        try:
            with open(self.config_file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config file {self.config_file_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {self.config_file_path}: expected a JSON object")
            return {}
        logger.debug(f"Loaded configuration from {self.config_file_path}")
        return data

    def _get_config_data(self) -> dict:
        """Get cached config data (lazy loading)."""
        if self._config_data is None:
            self._config_data = self._load_config_file()
        return self._config_data

    def reload(self):
        """Reload configuration from file."""
        self._config_data = None

    def get(self, key: str, default: Any = None, env_var: Optional[str] = None) -> Any:
        """
        Get a configuration value with priority:
        1. Environment variable (if env_var specified)
        2. Config file
        3. Default value

        Args:
            key: Configuration key
            default: Default value if not found
            env_var: Optional environment variable name to check

        Returns:
            Configuration value
        """
        if env_var:
            env_value = os.getenv(env_var)
            if env_value is not None:
                # Try to parse as JSON for numbers and other non-string types
                try:
                    return json.loads(env_value)
                except (json.JSONDecodeError, TypeError):
                    return env_value

        config_data = self._get_config_data()
        if key in config_data:
            return config_data[key]

        return default

    @property
    def default_workers(self) -> int:
        """Number of worker threads for asynchronous hashing."""
        return self.get(
            'default_workers',
            default=DEFAULT_WORKERS,
            env_var='IMGPHASH_WORKERS'
        )

    @property
    def default_threshold(self) -> int:
        """Hamming distance at or below which two fingerprints are similar (0-64)."""
        return self.get(
            'default_threshold',
            default=DEFAULT_THRESHOLD,
            env_var='IMGPHASH_THRESHOLD'
        )

    @property
    def max_image_pixels(self) -> int:
        """Maximum image size in pixels (decompression bomb limit)."""
        return self.get(
            'max_image_pixels',
            default=MAX_IMAGE_PIXELS,
            env_var='IMGPHASH_MAX_PIXELS'
        )

    def create_example_config(self) -> bool:
        """Create an example configuration file."""
        example_config = {
            "_comment": "imgphash user configuration",
            "default_workers": DEFAULT_WORKERS,
            "default_threshold": DEFAULT_THRESHOLD,
            "max_image_pixels": MAX_IMAGE_PIXELS,
        }

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(example_config, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to create example config: {e}")
            return False

        logger.info(f"Created example config file at {self.config_file_path}")
        return True


# Global instance
_user_config = UserConfig()


def get_user_config() -> UserConfig:
    """Get the global UserConfig instance."""
    return _user_config
