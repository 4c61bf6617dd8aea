"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml once and caches it.
Host code reads defaults through this; the engine itself takes explicit
values and never touches the file.
"""

import os
import yaml
from typing import Any, Dict

from core.models import DetectionConfig


_CONFIG_CACHE: Dict[str, Any] = {}


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        _CONFIG_CACHE = yaml.safe_load(f) or {}

    return _CONFIG_CACHE


def _get_section(name: str) -> Dict[str, Any]:
    config = load_config()
    if name not in config:
        raise KeyError(
            f"No '{name}' section in config. "
            f"Available: {list(config.keys())}"
        )
    return config[name]


def get_recurring_detection_config() -> Dict[str, Any]:
    """Returns the raw recurring_detection block."""
    return _get_section("recurring_detection")


def get_detection_config() -> DetectionConfig:
    """Returns the recurring_detection block as a DetectionConfig."""
    return DetectionConfig.from_dict(get_recurring_detection_config())


def get_reminder_config() -> Dict[str, Any]:
    """Returns the reminders block."""
    return _get_section("reminders")


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = {}
