"""
Assistant Client - Conversational front end over the Gemini-backed agents.
Every ask appends exactly one user turn and exactly one model turn.
"""

import logging
from typing import Optional

import httpx

from ..agents import ActivityCoachAgent, BaseAgent, NavigatorAgent
from ..core.exceptions import BusyError, ConfigurationError, LLMResponseError, ValidationError
from ..llm.base import LLMProvider
from ..models import ChatMessage, ChatSource, StepCount
from .session_state import ChatTranscript

logger = logging.getLogger(__name__)

MODEL_ERROR_TEXT = "Model response error: Could not generate content."


class AssistantClient:
    """
    Routes general questions to the navigator (search grounded) and step
    assessments to the activity coach (no grounding). The full transcript is
    sent on every request.
    """

    def __init__(self, llm_provider: Optional[LLMProvider] = None):
        self.navigator = NavigatorAgent()
        self.coach = ActivityCoachAgent()
        for agent in (self.navigator, self.coach):
            agent.set_llm_provider(llm_provider)

    @property
    def is_configured(self) -> bool:
        return self.navigator.is_configured

    @staticmethod
    def ensure_idle(transcript: ChatTranscript) -> None:
        """
        Raises:
            BusyError: If a previous ask on this transcript is still running
        """
        if transcript.awaiting_response:
            raise BusyError("The assistant is still answering the previous message.")

    async def ask(self, transcript: ChatTranscript, text: str, is_step_assessment: bool = False) -> ChatMessage:
        """
        Append ``text`` as a user turn, then the model's reply.

        Failures never raise to the caller once the user turn is appended:
        they become a model turn carrying the error text.

        Returns:
            ChatMessage: The model turn that was appended

        Raises:
            ValidationError: If ``text`` is blank
            BusyError: If a previous ask on this transcript is still running
        """
        if not text or not text.strip():
            raise ValidationError("Message text is required.")
        self.ensure_idle(transcript)

        agent = self.coach if is_step_assessment else self.navigator
        transcript.append(ChatMessage(role="user", text=text))
        transcript.awaiting_response = True
        try:
            reply = await self._generate(agent, transcript)
        finally:
            transcript.awaiting_response = False

        transcript.append(reply)
        return reply

    async def _generate(self, agent: BaseAgent, transcript: ChatTranscript) -> ChatMessage:
        try:
            response = await agent.respond(transcript.messages)
        except ConfigurationError as e:
            logger.warning(f"Assistant unavailable: {e.message}")
            text = e.message
        except LLMResponseError:
            text = MODEL_ERROR_TEXT
        except httpx.HTTPError as e:
            logger.error(f"Assistant request failed: {e}")
            text = f"Failed to connect to AI: {e}."
        except Exception as e:
            logger.error(f"Assistant request failed unexpectedly: {e}", exc_info=True)
            text = f"Failed to connect to AI: {e}."
        else:
            return ChatMessage(
                role="model",
                text=response.content,
                sources=[ChatSource(uri=s.uri, title=s.title) for s in response.sources],
            )
        return ChatMessage(role="model", text=text)

    async def assess_steps(self, transcript: ChatTranscript, step_count: StepCount) -> ChatMessage:
        """Ask the activity coach about a fetched step count."""
        prompt = self.coach.assessment_prompt(step_count)
        return await self.ask(transcript, prompt, is_step_assessment=True)
