"""
Google Gemini LLM Provider.
Talks to the ``generateContent`` REST endpoint of the Generative Language API.
"""

import httpx
import json
import logging
import time
from typing import Optional, List, Dict, Any

from ..core.exceptions import LLMResponseError
from ..core.logging_config import redact_url
from .base import LLMProvider, LLMMessage, LLMResponse, LLMSource

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Provider for Google Gemini models.
    The API key travels in the ``key`` query parameter.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash-preview-09-2025",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        default_temperature: Optional[float] = None,
        timeout: float = 60.0,
        log_calls: bool = True,
    ):
        super().__init__(api_key, model, base_url, default_temperature)
        self.timeout = timeout
        self.log_calls = log_calls

    def _endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent?key={self.api_key}"

    def _format_contents(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage list to Gemini ``contents``."""
        return [{"role": m.role, "parts": [{"text": m.content}]} for m in messages]

    def build_payload(
        self,
        messages: List[LLMMessage],
        system_instruction: Optional[str] = None,
        use_search: bool = False,
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Build the generateContent request body."""
        payload: Dict[str, Any] = {"contents": self._format_contents(messages)}
        if use_search:
            payload["tools"] = [{"google_search": {}}]
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        temperature = temperature if temperature is not None else self.default_temperature
        if temperature is not None:
            payload["generationConfig"] = {"temperature": temperature}
        return payload

    @staticmethod
    def extract_sources(candidate: Dict[str, Any]) -> List[LLMSource]:
        """
        Collect web citations from a candidate's grounding metadata.

        Older API versions report ``groundingAttributions``, current ones
        ``groundingChunks``; both carry a ``web`` object with uri and title.
        Entries missing either field are dropped, repeated URIs collapsed.
        """
        metadata = candidate.get("groundingMetadata") or {}
        entries = (metadata.get("groundingAttributions") or []) + (metadata.get("groundingChunks") or [])

        sources: List[LLMSource] = []
        seen = set()
        for entry in entries:
            web = entry.get("web") or {}
            uri, title = web.get("uri"), web.get("title")
            if not uri or not title or uri in seen:
                continue
            seen.add(uri)
            sources.append(LLMSource(uri=uri, title=title))
        return sources

    @staticmethod
    def extract_text(data: Dict[str, Any]) -> Optional[str]:
        """Return ``candidates[0].content.parts[0].text`` or None."""
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            return None
        return parts[0].get("text") or None

    async def generate(
        self,
        messages: List[LLMMessage],
        system_instruction: Optional[str] = None,
        use_search: bool = False,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """Send one generateContent request."""
        start_time = time.time()
        url = self._endpoint()
        payload = self.build_payload(messages, system_instruction, use_search, temperature)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Gemini call starting: url={redact_url(url)}, {len(messages)} messages, "
                f"use_search={use_search}"
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=payload, headers={"Content-Type": "application/json"})

            if resp.status_code >= 400:
                raise LLMResponseError(f"Gemini API error: HTTP {resp.status_code}")

            try:
                data = resp.json()
            except json.JSONDecodeError as e:
                raise LLMResponseError("Gemini API returned a non-JSON body") from e

            text = self.extract_text(data)
            if text is None:
                raise LLMResponseError("Gemini API response has no text content")
        except Exception as e:
            logger.error(
                f"Gemini call failed: {str(e)}",
                exc_info=not isinstance(e, LLMResponseError),
                extra={"extra_fields": {
                    "provider": "gemini",
                    "model": self.model,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                    "error": str(e),
                }}
            )
            raise

        usage_metadata = data.get("usageMetadata") or {}
        usage = {
            "prompt_tokens": usage_metadata.get("promptTokenCount", 0),
            "completion_tokens": usage_metadata.get("candidatesTokenCount", 0),
            "total_tokens": usage_metadata.get("totalTokenCount", 0),
        }
        sources = self.extract_sources(data["candidates"][0])

        if self.log_calls:
            logger.info(
                "Gemini call completed",
                extra={"extra_fields": {
                    "provider": "gemini",
                    "model": data.get("modelVersion", self.model),
                    **usage,
                    "sources": len(sources),
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                }}
            )

        return LLMResponse(
            content=text,
            sources=sources,
            model=data.get("modelVersion", self.model),
            usage=usage,
            raw=data,
        )
