"""Services module - session-scoped features built on storage, Google Fit and the LLM."""

from .session_state import ChatTranscript, SessionState, SessionRegistry
from .medication_store import MedicationStore, MedicationSync
from .google_fit import GoogleFitClient
from .fitness_connector import FitnessConnector
from .assistant import AssistantClient

__all__ = [
    'ChatTranscript', 'SessionState', 'SessionRegistry',
    'MedicationStore', 'MedicationSync',
    'GoogleFitClient', 'FitnessConnector',
    'AssistantClient',
]
