"""
Fitness Models - Google Fit connection and step data.
"""

from typing import Optional
from pydantic import BaseModel

from .chat import ChatReply
from .session import Notice


class RedirectFragment(BaseModel):
    """URL fragment the browser received from the OAuth redirect."""
    fragment: str


class StepCount(BaseModel):
    """Aggregated steps for one UTC calendar day."""
    steps: int = 0
    has_data: bool = False  # False when the provider returned no value at all
    start_time_millis: int
    end_time_millis: int


class FitnessStatus(BaseModel):
    """Connection state of the current session."""
    connected: bool
    step_count: Optional[StepCount] = None
    is_loading: bool = False


class StepsResult(BaseModel):
    """Response of a step fetch."""
    step_count: StepCount
    notice: Notice


class StepAssessment(BaseModel):
    """Response of the fetch-then-assess workflow."""
    step_count: StepCount
    chat: ChatReply
