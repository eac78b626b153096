"""
Base Agent Class - A system prompt plus the policy for calling the model.
"""

import logging
from typing import Optional, List, Sequence
from datetime import datetime

from ..core.exceptions import ConfigurationError
from ..llm.base import LLMProvider, LLMMessage, LLMResponse
from ..models import ChatMessage

logger = logging.getLogger(__name__)


class BaseAgent:
    """
    Base class for assistant personas.
    Subclasses supply the system prompt and whether web search grounding is allowed.
    """

    def __init__(self, name: str, system_prompt: str, use_search: bool = False):
        """
        Initialize base agent.

        Args:
            name: Agent name
            system_prompt: System instruction sent with every request
            use_search: Whether the model may ground answers with web search
        """
        self.name = name
        self.system_prompt = system_prompt
        self.use_search = use_search
        self.created_at = datetime.now()
        self._llm_provider: Optional[LLMProvider] = None

    def set_llm_provider(self, provider: Optional[LLMProvider]) -> None:
        """Set the LLM provider for this agent."""
        self._llm_provider = provider

    @property
    def is_configured(self) -> bool:
        return self._llm_provider is not None

    @staticmethod
    def to_llm_messages(transcript: Sequence[ChatMessage]) -> List[LLMMessage]:
        """Convert transcript entries to provider messages, oldest first."""
        return [LLMMessage(role=message.role, content=message.text) for message in transcript]

    async def respond(self, transcript: Sequence[ChatMessage]) -> LLMResponse:
        """
        Generate the next model turn for the transcript.

        Raises:
            ConfigurationError: If no provider has been set
            LLMResponseError, httpx.HTTPError: Propagated from the provider
        """
        if self._llm_provider is None:
            raise ConfigurationError(
                f"The assistant is not configured ({self.name}). "
                f"Set GEMINI_API_KEY in the environment to enable AI responses."
            )

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Agent {self.name} calling LLM: {len(transcript)} messages, "
                f"use_search={self.use_search}"
            )

        response = await self._llm_provider.generate(
            self.to_llm_messages(transcript),
            system_instruction=self.system_prompt,
            use_search=self.use_search,
        )

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Agent {self.name} received LLM response: length={len(response.content)} chars, "
                f"sources={len(response.sources)}"
            )
        return response
