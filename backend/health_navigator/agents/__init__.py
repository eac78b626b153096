"""Agents module - assistant personas."""

from .base_agent import BaseAgent
from .navigator_agent import NavigatorAgent
from .coach_agent import ActivityCoachAgent

__all__ = [
    'BaseAgent',
    'NavigatorAgent',
    'ActivityCoachAgent',
]
