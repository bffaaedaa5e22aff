# fitz_patchwork/llm/gemini.py
"""
Google Gemini client over the generateContent REST endpoint.

The API key travels as a query parameter; it is passed in explicitly at
construction and never read from the environment here.
"""

import logging

import httpx

from fitz_patchwork.errors import UpstreamError

logger = logging.getLogger(__name__)


def to_gemini_contents(messages: list[dict]) -> tuple[list[dict], dict | None]:
    """
    Convert chat messages to Gemini (contents, systemInstruction).

    Assistant turns become role "model"; system messages are joined into
    one system instruction.
    """
    contents = []
    system_parts = []
    for message in messages:
        if message["role"] == "system":
            system_parts.append({"text": message["content"]})
            continue
        role = "model" if message["role"] == "assistant" else "user"
        contents.append({"role": role, "parts": [{"text": message["content"]}]})
    return contents, ({"parts": system_parts} if system_parts else None)


class GeminiClient:
    """Async Gemini REST client."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta/models",
        timeout: float | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.model}:generateContent"

    async def health_check(self) -> bool:
        """True when an API key is configured and the model endpoint answers."""
        if not self.api_key:
            logger.error("Gemini API key is not set (GEMINI_API_KEY)")
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as http:
                response = await http.get(f"{self.base_url}/{self.model}", params={"key": self.api_key})
            return response.status_code == 200
        except Exception as e:
            logger.error(f"Gemini health check failed: {e}")
            return False

    async def generate(self, messages: list[dict]) -> str:
        """
        Generate a response with one generateContent call.

        Raises:
            UpstreamError: Missing key, non-2xx status, transport error or
                a response without text
        """
        if not self.api_key:
            raise UpstreamError("Gemini API key is not set (GEMINI_API_KEY)")

        contents, system = to_gemini_contents(messages)
        body: dict = {"contents": contents}
        if system:
            body["systemInstruction"] = system

        logger.info(f"Gemini.generate: model={self.model}, messages={len(messages)}")
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as http:
                response = await http.post(self.endpoint, params={"key": self.api_key}, json=body)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Gemini request failed: {e}") from e

        if not response.is_success:
            raise UpstreamError(f"Gemini API error: {response.status_code} {response.reason_phrase}")

        data = response.json()
        try:
            result = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Gemini response contained no text") from e
        if not result.strip():
            raise UpstreamError("Gemini returned an empty response")

        logger.info(f"Gemini.generate: {len(result)} chars")
        return result
