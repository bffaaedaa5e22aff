# fitz_patchwork/llm/lm_studio.py
"""LM Studio client over its OpenAI-compatible endpoint."""

import logging

import httpx
from openai import AsyncOpenAI, OpenAIError

from fitz_patchwork.errors import UpstreamError

logger = logging.getLogger(__name__)


class LMStudioClient:
    """
    Async client for LM Studio's local server (default http://localhost:1234/v1).

    Uses the openai SDK with retries disabled; the key is a placeholder
    LM Studio ignores.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:1234/v1",
        model: str = "local-model",
        timeout: int | None = None,
    ):
        self.base_url = base_url
        self.model = model
        self._client = AsyncOpenAI(base_url=base_url, api_key="lm-studio", timeout=timeout, max_retries=0)

    async def health_check(self) -> bool:
        """True when GET /models answers 200."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as http:
                response = await http.get(f"{self.base_url}/models")
        except httpx.HTTPError as e:
            logger.error(f"LM Studio not reachable at {self.base_url}: {e}")
            return False
        return response.status_code == 200

    async def generate(self, messages: list[dict]) -> str:
        """
        Stream a chat completion and return the joined text.

        Raises:
            UpstreamError: On API errors or an empty response
        """
        logger.info(f"LMStudio.generate: model={self.model}, messages={len(messages)}")

        parts = []
        try:
            stream = await self._client.chat.completions.create(
                model=self.model, messages=messages, stream=True
            )
            async for chunk in stream:
                delta = chunk.choices[0].delta if chunk.choices else None
                if delta and delta.content:
                    parts.append(delta.content)
        except OpenAIError as e:
            raise UpstreamError(f"LM Studio request failed: {e}") from e

        text = "".join(parts)
        if not text.strip():
            raise UpstreamError("LM Studio returned an empty response")
        logger.info(f"LMStudio.generate: {len(text)} chars")
        return text
