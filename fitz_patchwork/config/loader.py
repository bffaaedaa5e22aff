# fitz_patchwork/config/loader.py
"""
Configuration loading with auto-creation of defaults.

Uses platformdirs for cross-platform config directory management. A
project-local .fitz-patchwork.yaml overrides top-level sections of the
user config.
"""

import logging
import os
from pathlib import Path

import yaml
from platformdirs import user_config_path

from .schema import PatchworkConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".fitz-patchwork.yaml"


def get_config_path() -> Path:
    """Get path to config file, ensuring config directory exists."""
    config_dir = user_config_path("fitz-patchwork", ensure_exists=True)
    return config_dir / "config.yaml"


def _read_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _apply_env_keys(config: PatchworkConfig) -> PatchworkConfig:
    """Fill unset API keys from the environment, once, at load time."""
    if config.gemini.api_key is None:
        config.gemini.api_key = os.getenv("GEMINI_API_KEY")
    if config.anthropic.api_key is None:
        config.anthropic.api_key = os.getenv("ANTHROPIC_API_KEY")
    return config


def load_config(
    project_dir: str | Path | None = None,
    config_path: Path | None = None,
) -> PatchworkConfig:
    """
    Load configuration from YAML.

    If the user config file doesn't exist, creates it with defaults.
    A project-local override file replaces whole top-level sections.

    Args:
        project_dir: Project root to look for .fitz-patchwork.yaml in
        config_path: Explicit user config path (defaults to get_config_path())

    Returns:
        Validated PatchworkConfig
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        default_config = PatchworkConfig()
        config_dict = default_config.model_dump(mode="json")

        with config_path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Created default config at {config_path}")
        config_data: dict = {}
    else:
        config_data = _read_yaml(config_path)
        logger.info(f"Loaded config from {config_path}")

    if project_dir is not None:
        override_path = Path(project_dir) / PROJECT_CONFIG_NAME
        if override_path.is_file():
            config_data.update(_read_yaml(override_path))
            logger.info(f"Applied project overrides from {override_path}")

    return _apply_env_keys(PatchworkConfig(**config_data))
