# tests/unit/test_llm_clients.py
"""Tests for the LLM clients and the provider factory."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest
from ollama import ResponseError
from openai import OpenAIError

from fitz_patchwork.config.schema import PatchworkConfig
from fitz_patchwork.errors import UpstreamError
from fitz_patchwork.llm import (
    AnthropicClient,
    GeminiClient,
    LMStudioClient,
    OllamaClient,
    create_llm_client,
)
from fitz_patchwork.llm.gemini import to_gemini_contents

MESSAGES = [
    {"role": "system", "content": "You write code."},
    {"role": "user", "content": "Add top tracks"},
]


async def _ollama_stream(*texts):
    for text in texts:
        yield {"message": {"content": text}}


async def _openai_stream(*texts):
    for text in texts:
        chunk = MagicMock()
        chunk.choices = [MagicMock()]
        chunk.choices[0].delta.content = text
        yield chunk


class TestOllamaClient:
    @pytest.mark.asyncio
    async def test_health_check_model_available(self):
        client = OllamaClient(base_url="http://localhost:11434", model="qwen2.5-coder:32b-instruct")
        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = {"models": [{"model": "qwen2.5-coder:32b-instruct"}]}
            assert await client.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_server_down(self):
        client = OllamaClient(base_url="http://localhost:11434", model="qwen2.5-coder:32b-instruct")
        with patch.object(client.client, "list", new_callable=AsyncMock) as mock_list:
            mock_list.side_effect = ConnectionError("Connection refused")
            assert await client.health_check() is False

    @pytest.mark.asyncio
    async def test_generate_accumulates_stream(self):
        client = OllamaClient(base_url="http://localhost:11434", model="qwen2.5-coder:32b-instruct")
        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = _ollama_stream("// src/db/", "schema.ts", "\n```ts\n```")
            result = await client.generate(MESSAGES)

        assert result == "// src/db/schema.ts\n```ts\n```"
        assert mock_chat.call_args.kwargs["stream"] is True

    @pytest.mark.asyncio
    async def test_generate_wraps_errors(self):
        client = OllamaClient(base_url="http://localhost:11434", model="missing")
        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.side_effect = ResponseError("model not found")
            with pytest.raises(UpstreamError, match="Ollama request failed"):
                await client.generate(MESSAGES)

    @pytest.mark.asyncio
    async def test_generate_empty_response(self):
        client = OllamaClient(base_url="http://localhost:11434", model="qwen2.5-coder:32b-instruct")
        with patch.object(client.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = _ollama_stream("", "  ")
            with pytest.raises(UpstreamError, match="empty"):
                await client.generate(MESSAGES)


class TestLMStudioClient:
    def _client(self):
        with patch("fitz_patchwork.llm.lm_studio.AsyncOpenAI"):
            return LMStudioClient(model="local-model")

    @pytest.mark.asyncio
    async def test_generate_accumulates_stream(self):
        client = self._client()
        client._client.chat.completions.create = AsyncMock(return_value=_openai_stream("Hello ", "world"))
        assert await client.generate(MESSAGES) == "Hello world"

    @pytest.mark.asyncio
    async def test_generate_wraps_errors(self):
        client = self._client()
        client._client.chat.completions.create = AsyncMock(side_effect=OpenAIError("boom"))
        with pytest.raises(UpstreamError, match="LM Studio request failed"):
            await client.generate(MESSAGES)


def _mock_http(response):
    http = MagicMock()
    http.post = AsyncMock(return_value=response)
    http.__aenter__ = AsyncMock(return_value=http)
    http.__aexit__ = AsyncMock(return_value=False)
    return http


def _response(status, payload=None):
    request = httpx.Request("POST", "https://example.test/models/m:generateContent")
    return httpx.Response(status, json=payload or {}, request=request)


class TestGeminiClient:
    def test_contents_conversion(self):
        contents, system = to_gemini_contents(MESSAGES + [{"role": "assistant", "content": "ok"}])
        assert system == {"parts": [{"text": "You write code."}]}
        assert [c["role"] for c in contents] == ["user", "model"]

    def test_endpoint(self):
        client = GeminiClient(api_key="k", model="gemini-2.0-flash", base_url="https://x.test/models/")
        assert client.endpoint == "https://x.test/models/gemini-2.0-flash:generateContent"

    @pytest.mark.asyncio
    async def test_generate_reads_first_candidate(self):
        client = GeminiClient(api_key="k")
        payload = {"candidates": [{"content": {"parts": [{"text": "generated"}]}}]}
        http = _mock_http(_response(200, payload))
        with patch("httpx.AsyncClient", return_value=http):
            assert await client.generate(MESSAGES) == "generated"

        kwargs = http.post.call_args.kwargs
        assert kwargs["params"] == {"key": "k"}
        assert kwargs["json"]["systemInstruction"] == {"parts": [{"text": "You write code."}]}

    @pytest.mark.asyncio
    async def test_generate_non_success_status(self):
        client = GeminiClient(api_key="k")
        with patch("httpx.AsyncClient", return_value=_mock_http(_response(403))):
            with pytest.raises(UpstreamError, match="Gemini API error: 403 Forbidden"):
                await client.generate(MESSAGES)

    @pytest.mark.asyncio
    async def test_generate_without_key(self):
        with pytest.raises(UpstreamError, match="GEMINI_API_KEY"):
            await GeminiClient(api_key=None).generate(MESSAGES)


class TestAnthropicClient:
    @pytest.mark.asyncio
    async def test_generate_splits_system(self):
        client = AnthropicClient(api_key="k")
        response = SimpleNamespace(content=[SimpleNamespace(type="text", text="generated")])
        client._client = MagicMock()
        client._client.messages.create = AsyncMock(return_value=response)

        assert await client.generate(MESSAGES) == "generated"
        kwargs = client._client.messages.create.call_args.kwargs
        assert kwargs["system"] == "You write code."
        assert kwargs["messages"] == [MESSAGES[1]]

    @pytest.mark.asyncio
    async def test_generate_wraps_errors(self):
        client = AnthropicClient(api_key="k")
        client._client = MagicMock()
        client._client.messages.create = AsyncMock(side_effect=anthropic.AnthropicError("boom"))
        with pytest.raises(UpstreamError, match="Anthropic request failed"):
            await client.generate(MESSAGES)

    @pytest.mark.asyncio
    async def test_health_check_without_key(self):
        assert await AnthropicClient(api_key=None).health_check() is False


class TestFactory:
    @pytest.mark.parametrize(
        "provider, expected",
        [
            ("ollama", OllamaClient),
            ("lm_studio", LMStudioClient),
            ("gemini", GeminiClient),
            ("anthropic", AnthropicClient),
        ],
    )
    def test_provider_selection(self, provider, expected):
        config = PatchworkConfig(provider=provider)
        assert isinstance(create_llm_client(config), expected)

    def test_gemini_key_passed_through(self):
        config = PatchworkConfig(provider="gemini", gemini={"api_key": "k", "model": "m"})
        client = create_llm_client(config)
        assert client.api_key == "k"
        assert client.model == "m"
