"""
Activity Coach Agent - Feedback on yesterday's step count.
Works from structured data only, so search grounding is off.
"""

from ..models import StepCount
from .base_agent import BaseAgent


class ActivityCoachAgent(BaseAgent):
    """Encouraging virtual health coach for step-count assessments."""

    def __init__(self):
        system_prompt = (
            "You are an encouraging and helpful virtual health coach. "
            "Analyze the user's step count and provide concise, motivating feedback "
            "and a simple, actionable suggestion in 2-3 sentences. "
            "Focus on positive reinforcement."
        )
        super().__init__("ActivityCoachAgent", system_prompt, use_search=False)

    @staticmethod
    def assessment_prompt(step_count: StepCount) -> str:
        """Build the synthetic user turn for a step assessment."""
        if not step_count.has_data:
            return (
                "Yesterday, no step data was recorded for the user. "
                "Please provide an assessment and feedback based on this activity level."
            )
        return (
            f"Yesterday, the user took exactly {step_count.steps:,} steps. "
            "Please provide an assessment and feedback based on this activity level."
        )
