"""
Navigator Agent - General health and wellness questions, grounded with web search.
"""

from .base_agent import BaseAgent


class NavigatorAgent(BaseAgent):
    """Concise, factual wellness navigator."""

    def __init__(self):
        system_prompt = (
            "You are a concise, knowledgeable health and wellness navigator. "
            "Provide a direct, factual answer to the user's question. "
            "Limit your response to a maximum of 4-5 sentences. "
            "Use Google Search grounding for medical/factual queries."
        )
        super().__init__("NavigatorAgent", system_prompt, use_search=True)
