"""
Jigsaw Sudoku Solver Configuration Module

Configuration is a two-level JSON document. Each top-level section belongs to
one component:

- ``system``: log level and debug mode
- ``boundary_classifier``: median threshold factor and outer-border forcing
- ``solver``: default step budget of the backtracking search
- ``pipeline``: validation switches and report output
- ``visualization``: cell size and line widths of rendered regions

A file only needs the keys it changes; everything else comes from
``DEFAULT_CONFIG``. Keys are addressed as ``"section.key"``.
"""

import os
import copy
import json
import logging
from typing import Any, Dict, List, Optional

from .default_fallbacks import DEFAULT_CONFIG
from ..utils.error_handling import ConfigError

# Configure logging
logger = logging.getLogger(__name__)

# Active configuration, replaced on every load
_config: Dict[str, Any] = {}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base, section by section."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def _split_key(key: str) -> List[str]:
    return key.split('.')


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the active configuration from the defaults and an optional file.

    A missing file is not an error: the solver runs on defaults, e.g. a step
    budget of 1,000,000 and a threshold factor of 1.5.

    Args:
        config_path: Path to a JSON document with section overrides

    Returns:
        The active configuration dictionary

    Raises:
        ConfigError: If the file exists but is not a JSON object
    """
    global _config

    _config = copy.deepcopy(DEFAULT_CONFIG)

    if not config_path or not os.path.exists(config_path):
        logger.info("No configuration file provided or found, using defaults")
        return _config

    try:
        with open(config_path, 'r') as f:
            overrides = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Error loading config from {config_path}: {str(e)}")
        raise ConfigError(f"Failed to load configuration: {str(e)}")

    if not isinstance(overrides, dict):
        raise ConfigError(f"Configuration root must be an object, got {type(overrides).__name__}")

    _merge(_config, overrides)
    logger.info(f"Configuration loaded from {config_path} (sections: {', '.join(sorted(overrides))})")

    return _config


def get_config() -> Dict[str, Any]:
    """Return the active configuration, loading the defaults on first use."""
    if not _config:
        return load_config()
    return _config


def get_setting(key: str, default: Any = None) -> Any:
    """
    Look up a setting such as ``"solver.max_steps"`` or a whole section.

    Args:
        key: Section name or ``"section.key"``
        default: Returned when the key does not exist

    Returns:
        Setting value or default
    """
    value: Any = get_config()

    for part in _split_key(key):
        if not isinstance(value, dict) or part not in value:
            if '.' in key:
                logger.warning(f"Configuration key '{key}' not found, using default: {default}")
            return default
        value = value[part]

    return value


def set_setting(key: str, value: Any) -> None:
    """
    Override a setting of the active configuration, e.g. a per-run step budget.

    Args:
        key: Section name or ``"section.key"``
        value: New value
    """
    parts = _split_key(key)
    section = get_config()

    for part in parts[:-1]:
        section = section.setdefault(part, {})
    section[parts[-1]] = value

    logger.debug(f"Configuration updated: {key} = {value}")


def save_config(config_path: str) -> None:
    """
    Write the active configuration, all sections included, as JSON.

    Args:
        config_path: Destination file, parent directories are created

    Raises:
        ConfigError: If the file cannot be written
    """
    try:
        directory = os.path.dirname(config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(config_path, 'w') as f:
            json.dump(get_config(), f, indent=4)

    except (IOError, OSError) as e:
        logger.error(f"Failed to save configuration to {config_path}: {str(e)}")
        raise ConfigError(f"Failed to save configuration: {str(e)}")

    logger.info(f"Configuration saved to {config_path}")
