"""Configuration loader with YAML and environment variable support.

Reads ~/.config/promptweave/config.yaml and allows environment variable
overrides using the PROMPTWEAVE_* prefix.

Environment variables:
- PROMPTWEAVE_DATA_DIR: Override storage.data_dir
- PROMPTWEAVE_DRAFT_HISTORY_LIMIT: Override storage.draft_history_limit
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from promptweave.models.config import Config
from promptweave.utils.logging import get_logger


logger = get_logger(__name__)


def default_config_path() -> Path:
    return Path.home() / ".config" / "promptweave" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/promptweave/config.yaml

    Returns:
        Validated Config object

    Raises:
        ValueError: If config file is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    data: Dict[str, Any] = {}
    if config_path.exists():
        with config_path.open() as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {config_path}")

    data = _apply_env_overrides(data)

    try:
        config = Config(**data)
    except Exception as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e

    logger.info("config_loaded", path=str(config_path), data_dir=config.storage.data_dir)
    return config


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: PROMPTWEAVE_KEY
    For example: PROMPTWEAVE_DATA_DIR sets data['storage']['data_dir']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    if not isinstance(data.get("storage"), dict):
        data["storage"] = {}

    if env_data_dir := os.getenv("PROMPTWEAVE_DATA_DIR"):
        data["storage"]["data_dir"] = env_data_dir

    if env_limit := os.getenv("PROMPTWEAVE_DRAFT_HISTORY_LIMIT"):
        try:
            data["storage"]["draft_history_limit"] = int(env_limit)
        except ValueError:
            pass  # Invalid value, ignore

    return data
