"""
Unit tests for the LLM module.
Tests LLMMessage, LLMResponse, the Gemini provider, and factory.
"""

import pytest
import httpx
from unittest.mock import patch

from health_navigator.core.exceptions import LLMResponseError
from health_navigator.llm.base import LLMMessage, LLMResponse
from health_navigator.llm.gemini_provider import GeminiProvider
from health_navigator.llm.factory import create_llm_provider

from conftest import json_response, mock_async_client


GROUNDED_RESPONSE = {
    "candidates": [{
        "content": {"parts": [{"text": "Walking 30 minutes a day helps."}], "role": "model"},
        "groundingMetadata": {
            "groundingAttributions": [
                {"web": {"uri": "https://who.int/activity", "title": "WHO"}},
                {"web": {"uri": "https://missing-title.example"}},
            ],
            "groundingChunks": [
                {"web": {"uri": "https://who.int/activity", "title": "WHO (duplicate)"}},
                {"web": {"uri": "https://cdc.gov/walking", "title": "CDC"}},
            ],
        },
    }],
    "usageMetadata": {"promptTokenCount": 12, "candidatesTokenCount": 8, "totalTokenCount": 20},
    "modelVersion": "gemini-2.5-flash",
}


class TestLLMMessage:
    """Tests for LLMMessage dataclass."""

    def test_user_message(self):
        msg = LLMMessage.user("Hello")
        assert msg.role == "user"
        assert msg.content == "Hello"

    def test_model_message(self):
        msg = LLMMessage.model("Hi there")
        assert msg.role == "model"
        assert msg.content == "Hi there"


class TestLLMResponse:
    """Tests for LLMResponse dataclass."""

    def test_basic_response(self):
        resp = LLMResponse(content="Hello!", model="gemini")
        assert resp.content == "Hello!"
        assert resp.sources == []
        assert resp.usage == {}
        assert resp.raw is None


class TestGeminiProvider:
    """Tests for the Gemini provider."""

    def test_init_defaults(self):
        provider = GeminiProvider(api_key="test-key")
        assert provider.model == "gemini-2.5-flash-preview-09-2025"
        assert provider.base_url == "https://generativelanguage.googleapis.com/v1beta"

    def test_endpoint_carries_key(self):
        provider = GeminiProvider(api_key="abc", model="gemini-x")
        assert provider._endpoint() == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-x:generateContent?key=abc"
        )

    def test_payload_with_search(self):
        provider = GeminiProvider(api_key="k")
        payload = provider.build_payload(
            [LLMMessage.user("hi"), LLMMessage.model("hello"), LLMMessage.user("steps?")],
            system_instruction="Be brief.",
            use_search=True,
        )
        assert payload["contents"] == [
            {"role": "user", "parts": [{"text": "hi"}]},
            {"role": "model", "parts": [{"text": "hello"}]},
            {"role": "user", "parts": [{"text": "steps?"}]},
        ]
        assert payload["tools"] == [{"google_search": {}}]
        assert payload["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
        assert "generationConfig" not in payload

    def test_payload_without_search(self):
        provider = GeminiProvider(api_key="k", default_temperature=0.2)
        payload = provider.build_payload([LLMMessage.user("hi")])
        assert "tools" not in payload
        assert "systemInstruction" not in payload
        assert payload["generationConfig"] == {"temperature": 0.2}

    def test_extract_sources_dedupes_and_drops_incomplete(self):
        sources = GeminiProvider.extract_sources(GROUNDED_RESPONSE["candidates"][0])
        assert [(s.uri, s.title) for s in sources] == [
            ("https://who.int/activity", "WHO"),
            ("https://cdc.gov/walking", "CDC"),
        ]

    def test_extract_text_missing(self):
        assert GeminiProvider.extract_text({}) is None
        assert GeminiProvider.extract_text({"candidates": [{"content": {"parts": []}}]}) is None

    @pytest.mark.asyncio
    async def test_generate_success(self):
        provider = GeminiProvider(api_key="test-key")

        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(json_response(200, GROUNDED_RESPONSE))
            mock_client.return_value = mock_instance

            result = await provider.generate([LLMMessage.user("How much should I walk?")], use_search=True)

            assert result.content == "Walking 30 minutes a day helps."
            assert result.model == "gemini-2.5-flash"
            assert result.usage["total_tokens"] == 20
            assert len(result.sources) == 2

            url = mock_instance.post.call_args.args[0]
            assert url.endswith(":generateContent?key=test-key")
            assert mock_instance.post.call_args.kwargs["json"]["tools"] == [{"google_search": {}}]

    @pytest.mark.asyncio
    async def test_generate_error_status(self):
        provider = GeminiProvider(api_key="test-key")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_async_client(json_response(400, {"error": {"message": "bad"}}))

            with pytest.raises(LLMResponseError):
                await provider.generate([LLMMessage.user("Hello")])

    @pytest.mark.asyncio
    async def test_generate_no_candidates(self):
        provider = GeminiProvider(api_key="test-key")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_async_client(json_response(200, {"candidates": []}))

            with pytest.raises(LLMResponseError):
                await provider.generate([LLMMessage.user("Hello")])

    @pytest.mark.asyncio
    async def test_generate_network_error_propagates(self):
        provider = GeminiProvider(api_key="test-key")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_async_client(side_effect=httpx.ConnectError("unreachable"))

            with pytest.raises(httpx.ConnectError):
                await provider.generate([LLMMessage.user("Hello")])


class TestLLMFactory:
    """Tests for LLM provider factory."""

    def test_create_gemini_provider(self):
        provider = create_llm_provider(provider="gemini", api_key="test-key", model="gemini-pro")
        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-pro"

    def test_no_api_key_returns_none(self):
        assert create_llm_provider(provider="gemini", api_key="") is None
        assert create_llm_provider(provider="gemini", api_key=None) is None

    def test_unsupported_provider_raises(self):
        with pytest.raises(ValueError, match="Unsupported"):
            create_llm_provider(provider="unsupported", api_key="key")

    def test_extra_kwargs_forwarded(self):
        provider = create_llm_provider(provider="gemini", api_key="key", timeout=5.0, log_calls=False)
        assert provider.timeout == 5.0
        assert provider.log_calls is False
