"""Models module."""

from .session import Notice, SignInRequest, SessionToken, SessionInfo, TokenData
from .medication import MedicationCreate, Medication, MedicationList
from .chat import ChatSource, ChatMessage, ChatRequest, ChatReply
from .fitness import RedirectFragment, StepCount, FitnessStatus, StepsResult, StepAssessment

__all__ = [
    'Notice', 'SignInRequest', 'SessionToken', 'SessionInfo', 'TokenData',
    'MedicationCreate', 'Medication', 'MedicationList',
    'ChatSource', 'ChatMessage', 'ChatRequest', 'ChatReply',
    'RedirectFragment', 'StepCount', 'FitnessStatus', 'StepsResult', 'StepAssessment',
]
