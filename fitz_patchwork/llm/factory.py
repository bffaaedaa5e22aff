# fitz_patchwork/llm/factory.py
"""Factory for creating the configured LLM client."""

from fitz_patchwork.config.schema import PatchworkConfig

from .anthropic_client import AnthropicClient
from .client import OllamaClient
from .gemini import GeminiClient
from .lm_studio import LMStudioClient

LLMClient = OllamaClient | LMStudioClient | GeminiClient | AnthropicClient


def create_llm_client(config: PatchworkConfig) -> LLMClient:
    """
    Create the appropriate LLM client based on config.provider.

    Args:
        config: Root PatchworkConfig

    Returns:
        Client exposing generate(messages) and health_check()
    """
    if config.provider == "lm_studio":
        return LMStudioClient(
            base_url=config.lm_studio.base_url,
            model=config.lm_studio.model,
            timeout=config.lm_studio.timeout,
        )
    if config.provider == "gemini":
        return GeminiClient(
            api_key=config.gemini.api_key,
            model=config.gemini.model,
            base_url=config.gemini.base_url,
        )
    if config.provider == "anthropic":
        return AnthropicClient(
            api_key=config.anthropic.api_key,
            model=config.anthropic.model,
            max_tokens=config.anthropic.max_tokens,
        )
    return OllamaClient(
        base_url=config.ollama.base_url,
        model=config.ollama.model,
        timeout=config.ollama.timeout,
    )
