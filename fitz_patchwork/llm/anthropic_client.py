# fitz_patchwork/llm/anthropic_client.py
"""Anthropic client for plan generation via the Messages API."""

import logging
from typing import TYPE_CHECKING

from fitz_patchwork.errors import UpstreamError

if TYPE_CHECKING:
    import anthropic

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Async client generating file edits with the Anthropic API."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 8192,
    ):
        """
        Initialize Anthropic client.

        Args:
            api_key: Anthropic API key
            model: Model to use
            max_tokens: Maximum tokens for the response
        """
        self._api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client: "anthropic.AsyncAnthropic | None" = None

    @property
    def client(self) -> "anthropic.AsyncAnthropic":
        """Lazy-loaded Anthropic client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(api_key=self._api_key, max_retries=0)
        return self._client

    async def health_check(self) -> bool:
        if not self._api_key:
            logger.error("Anthropic API key is not set (ANTHROPIC_API_KEY)")
            return False
        return True

    async def generate(self, messages: list[dict]) -> str:
        """
        Generate a response; system messages go to the system parameter.

        Raises:
            UpstreamError: On API errors or a response without text
        """
        import anthropic

        if not self._api_key:
            raise UpstreamError("Anthropic API key is not set (ANTHROPIC_API_KEY)")

        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        chat = [m for m in messages if m["role"] != "system"]
        kwargs = {"system": system} if system else {}

        logger.info(f"Anthropic.generate: model={self.model}, messages={len(chat)}")
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=chat,
                **kwargs,
            )
        except anthropic.AnthropicError as e:
            raise UpstreamError(f"Anthropic request failed: {e}") from e

        result = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        if not result.strip():
            raise UpstreamError("Anthropic returned an empty response")
        logger.info(f"Anthropic.generate: {len(result)} chars")
        return result

    async def close(self):
        """Close the async client if initialized."""
        if self._client is not None:
            await self._client.close()
            self._client = None
