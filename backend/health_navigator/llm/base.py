"""
LLM Provider Base - Abstract base for generative-model API providers.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field


@dataclass
class LLMMessage:
    """
    Represents one conversation turn.
    Roles follow the Gemini convention: "user" or "model".
    """
    role: str
    content: str

    @staticmethod
    def user(text: str) -> "LLMMessage":
        return LLMMessage(role="user", content=text)

    @staticmethod
    def model(text: str) -> "LLMMessage":
        return LLMMessage(role="model", content=text)


@dataclass
class LLMSource:
    """A web source the model cited when grounding its answer."""
    uri: str
    title: str


@dataclass
class LLMResponse:
    """Response from an LLM API call."""
    content: str
    sources: List[LLMSource] = field(default_factory=list)
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = None


class LLMProvider(ABC):
    """
    Abstract base class for LLM API providers.
    All providers must implement generate.
    """

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: Optional[float] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.default_temperature = default_temperature

    @abstractmethod
    async def generate(
        self,
        messages: List[LLMMessage],
        system_instruction: Optional[str] = None,
        use_search: bool = False,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate the next model turn for a conversation.

        Args:
            messages: Full conversation so far, oldest first
            system_instruction: Optional system prompt
            use_search: Allow the model to ground its answer with web search
            temperature: Sampling temperature override

        Returns:
            LLMResponse with the generated text and any cited sources

        Raises:
            LLMResponseError: If the API answers with an error or no text
            httpx.HTTPError: If the API cannot be reached
        """
        pass
