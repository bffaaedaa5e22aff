# fitz_patchwork/config/__init__.py
"""Configuration system for fitz-patchwork."""

from .loader import get_config_path, load_config
from .schema import (
    AnthropicConfig,
    GeminiConfig,
    LayoutConfig,
    LMStudioConfig,
    OllamaConfig,
    OutputConfig,
    PatchworkConfig,
)

__all__ = [
    "PatchworkConfig",
    "OllamaConfig",
    "LMStudioConfig",
    "GeminiConfig",
    "AnthropicConfig",
    "LayoutConfig",
    "OutputConfig",
    "load_config",
    "get_config_path",
]
