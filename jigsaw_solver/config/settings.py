"""
Jigsaw Sudoku Solver Settings Module

This module handles loading, validating, and providing access to system settings.
It enforces critical thresholds and validates configuration parameters.
"""

import logging
from typing import Any, Dict, Optional

from .default_fallbacks import CRITICAL_THRESHOLDS
from ..utils.error_handling import ConfigError

# Configure logging
logger = logging.getLogger(__name__)


class Settings:
    """
    Centralized settings management with validation and critical thresholds.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings with config from file or defaults.

        Args:
            config_path: Path to configuration file (optional)
        """
        # Import here to avoid circular imports
        from . import load_config

        self._config = load_config(config_path)
        self._validate_config()

    def _validate_config(self) -> None:
        """
        Validate configuration and enforce critical thresholds.

        Raises:
            ConfigError: If configuration contains invalid values
        """
        for key, min_value in CRITICAL_THRESHOLDS.items():
            current_value = self.get(key)

            if current_value is not None and current_value < min_value:
                logger.warning(
                    f"Config value {key}={current_value} is below critical threshold {min_value}. "
                    f"Setting to minimum allowed value."
                )
                self.set(key, min_value)

        log_level = self.get("system.log_level", "INFO")
        if not isinstance(logging.getLevelName(str(log_level).upper()), int):
            raise ConfigError(f"Invalid configuration: unknown log level '{log_level}'")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value with dot notation support.

        Args:
            key: Configuration key (e.g., "solver.max_steps")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        from . import get_setting
        return get_setting(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value with dot notation support.

        Args:
            key: Configuration key (e.g., "solver.max_steps")
            value: New value to set
        """
        from . import set_setting
        set_setting(key, value)

    def get_all(self) -> Dict[str, Any]:
        """Get the complete configuration dictionary."""
        return self._config

    def get_nested(self, section: str) -> Dict[str, Any]:
        """
        Get all settings within a section.

        Args:
            section: Section name (e.g., "solver", "boundary_classifier")

        Returns:
            Dict with section settings or empty dict if section not found
        """
        return self._config.get(section, {})

    def is_debug_mode(self) -> bool:
        """Check if system is in debug mode."""
        return self.get("system.debug_mode", False)


# Global settings instance
_settings: Optional[Settings] = None


def initialize_settings(config_path: Optional[str] = None) -> Settings:
    """
    Initialize global settings instance.

    Args:
        config_path: Path to configuration file

    Returns:
        Settings instance
    """
    global _settings
    _settings = Settings(config_path)
    return _settings


def get_settings() -> Settings:
    """
    Get global settings instance, initializing if necessary.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = initialize_settings()
    return _settings
