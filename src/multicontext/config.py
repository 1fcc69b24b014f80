"""Configuration loader with YAML and environment variable support.

Reads ~/.config/multicontext/config.yaml when it exists and lets
environment variables with the MULTICONTEXT_* prefix override it.

Environment variables:
- MULTICONTEXT_DATA_DIR: Override storage.data_dir
- MULTICONTEXT_ROOT_VALUE: Override outline.root_value
- MULTICONTEXT_REDIRECT_POLICY: Override outline.redirect_policy
- MULTICONTEXT_VERIFY_INVARIANTS: Override outline.verify_invariants (1/true/yes)
- MULTICONTEXT_AUTO_DRAIN: Override sync.auto_drain (1/true/yes)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from multicontext.models.config import Config
from multicontext.utils.logging import get_logger


logger = get_logger(__name__)


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/multicontext/config.yaml

    Returns:
        Validated Config (defaults fill in anything not set)

    Raises:
        ValueError: If the file or an override fails validation
    """
    if config_path is None:
        config_path = Path.home() / ".config" / "multicontext" / "config.yaml"

    if config_path.exists():
        with config_path.open() as f:
            data = yaml.safe_load(f) or {}
        logger.info("config_loaded", path=str(config_path))
    else:
        data = {}

    data = _apply_env_overrides(data)

    try:
        return Config(**data)
    except Exception as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    for section in ("storage", "outline", "sync"):
        if section not in data or data[section] is None:
            data[section] = {}

    if env_data_dir := os.getenv("MULTICONTEXT_DATA_DIR"):
        data["storage"]["data_dir"] = env_data_dir

    if env_root := os.getenv("MULTICONTEXT_ROOT_VALUE"):
        data["outline"]["root_value"] = env_root

    if env_policy := os.getenv("MULTICONTEXT_REDIRECT_POLICY"):
        data["outline"]["redirect_policy"] = env_policy.strip().lower()

    if env_verify := os.getenv("MULTICONTEXT_VERIFY_INVARIANTS"):
        data["outline"]["verify_invariants"] = _parse_bool(env_verify)

    if env_drain := os.getenv("MULTICONTEXT_AUTO_DRAIN"):
        data["sync"]["auto_drain"] = _parse_bool(env_drain)

    return data
