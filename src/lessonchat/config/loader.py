"""Configuration loader with YAML and environment variable support.

This module reads editor settings from ~/.config/lessonchat/config.yaml
and allows environment variable overrides using the LESSONCHAT_* prefix.
Every setting has a default, so a missing default config file is not an
error.

Environment variables:
- LESSONCHAT_MENTOR_NAME: Override editor.mentor_name
- LESSONCHAT_COURSE_NAME: Override editor.course_name
- LESSONCHAT_HISTORY_LIMIT: Override editor.history_limit
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from lessonchat.models.config import EditorConfig
from lessonchat.utils.logging import get_logger


logger = get_logger(__name__)


def default_config_path() -> Path:
    """Location of the per-user config file."""
    return Path.home() / ".config" / "lessonchat" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> EditorConfig:
    """Load editor configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/lessonchat/config.yaml
            and falls back to defaults when that file does not exist.

    Returns:
        Validated EditorConfig object

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValueError: If the config file is not valid YAML or fails validation

    Example config.yaml:
        editor:
          mentor_name: Karan
          course_name: Python
          history_limit: 20
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = default_config_path()

    if config_path.exists():
        logger.info("config_loading", path=str(config_path))
        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("config_yaml_invalid", path=str(config_path), error=str(e))
            raise ValueError(f"Configuration file is not valid YAML: {config_path}\n{e}") from e
    elif explicit:
        logger.error("config_not_found", path=str(config_path))
        raise FileNotFoundError(f"Configuration file not found at {config_path}")
    else:
        data = {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    data = _apply_env_overrides(data)

    try:
        config = EditorConfig(**data["editor"])
    except ValidationError as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e

    logger.info("config_loaded", path=str(config_path), history_limit=config.history_limit)
    return config


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: LESSONCHAT_KEY
    For example: LESSONCHAT_MENTOR_NAME sets data['editor']['mentor_name']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    if not isinstance(data.get("editor"), dict):
        data["editor"] = {}

    if env_mentor := os.getenv("LESSONCHAT_MENTOR_NAME"):
        data["editor"]["mentor_name"] = env_mentor

    if env_course := os.getenv("LESSONCHAT_COURSE_NAME"):
        data["editor"]["course_name"] = env_course

    if env_limit := os.getenv("LESSONCHAT_HISTORY_LIMIT"):
        try:
            data["editor"]["history_limit"] = int(env_limit)
        except ValueError:
            pass  # Invalid value, ignore

    return data
