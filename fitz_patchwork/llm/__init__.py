# fitz_patchwork/llm/__init__.py
"""LLM integration: one client per provider behind a common generate() call."""

from .anthropic_client import AnthropicClient
from .client import OllamaClient
from .factory import LLMClient, create_llm_client
from .gemini import GeminiClient
from .lm_studio import LMStudioClient

__all__ = [
    "OllamaClient",
    "LMStudioClient",
    "GeminiClient",
    "AnthropicClient",
    "LLMClient",
    "create_llm_client",
]
