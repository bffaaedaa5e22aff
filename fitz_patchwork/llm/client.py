# fitz_patchwork/llm/client.py
"""Ollama client: one streamed chat call per plan."""

import logging

import httpx
from ollama import AsyncClient, ResponseError

from fitz_patchwork.errors import UpstreamError

logger = logging.getLogger(__name__)


class OllamaClient:
    """
    Async client for a local Ollama server.

    The chat stream is accumulated into the full response text the block
    extractor works on. Nothing is retried: a failed call ends the run.
    """

    def __init__(self, base_url: str, model: str, timeout: int | None = None):
        """
        Args:
            base_url: Server URL, e.g. "http://localhost:11434"
            model: Model tag, e.g. "qwen2.5-coder:32b-instruct"
            timeout: Seconds to wait for the server (None = no limit)
        """
        self.base_url = base_url
        self.model = model
        self.client = AsyncClient(host=base_url, timeout=httpx.Timeout(timeout))

    async def health_check(self) -> bool:
        """
        True when the server answers. A missing model only warns, since
        Ollama pulls it on first use.
        """
        try:
            listing = await self.client.list()
            installed = [m.get("model") or m.get("name", "") for m in listing.get("models", [])]
        except Exception as e:
            logger.error(f"Ollama not reachable at {self.base_url}: {e}")
            return False

        family = self.model.split(":")[0]
        if not any(self.model == name or family in name for name in installed):
            logger.warning(f"Model {self.model} is not installed; Ollama will pull it on first use")
        return True

    async def generate(self, messages: list[dict]) -> str:
        """
        Stream a chat completion and return the joined text.

        Raises:
            UpstreamError: On API or connection errors, or an empty response
        """
        logger.info(f"Ollama.generate: model={self.model}, messages={len(messages)}")

        parts = []
        try:
            async for chunk in await self.client.chat(
                model=self.model, messages=messages, stream=True
            ):
                if content := chunk.get("message", {}).get("content"):
                    parts.append(content)
        except (ResponseError, httpx.HTTPError, ConnectionError) as e:
            raise UpstreamError(f"Ollama request failed: {e}") from e

        text = "".join(parts)
        if not text.strip():
            raise UpstreamError(f"Ollama returned an empty response (model={self.model})")
        logger.info(f"Ollama.generate: {len(text)} chars")
        return text
