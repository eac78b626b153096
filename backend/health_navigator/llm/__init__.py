"""LLM module - provides a unified interface for generative-model providers."""

from .base import LLMProvider, LLMMessage, LLMResponse, LLMSource
from .gemini_provider import GeminiProvider
from .factory import create_llm_provider

__all__ = [
    'LLMProvider',
    'LLMMessage',
    'LLMResponse',
    'LLMSource',
    'GeminiProvider',
    'create_llm_provider',
]
