"""
Session State - Per-user, in-memory state that never reaches the document store.
Holds the fitness token, last step count and the chat transcript.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING

from ..models import ChatMessage, StepCount

if TYPE_CHECKING:
    from .medication_store import MedicationSync

logger = logging.getLogger(__name__)


class ChatTranscript:
    """
    Append-only conversation for one session.

    ``awaiting_response`` is the only mutable flag: it is set while a request
    to the assistant is outstanding.
    """

    def __init__(self):
        self._messages: List[ChatMessage] = []
        self.awaiting_response = False

    def append(self, message: ChatMessage) -> None:
        self._messages.append(message)

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.messages)


@dataclass
class SessionState:
    """Everything the server remembers about one signed-in user."""
    user_id: str
    transcript: ChatTranscript = field(default_factory=ChatTranscript)
    fitness_token: Optional[str] = None
    step_count: Optional[StepCount] = None
    is_fit_loading: bool = False
    medication_sync: Optional["MedicationSync"] = None
    last_seen: float = 0.0


class SessionRegistry:
    """
    In-memory registry of session state keyed by user id.

    Sessions untouched for ``idle_ttl`` seconds are evicted and their live
    medication views stopped. Beyond ``max_sessions`` the least recently
    seen sessions go first. Sessions with a request in flight are kept.
    """

    def __init__(
        self,
        idle_ttl: float = 2 * 60 * 60,
        max_sessions: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_ttl = idle_ttl
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, SessionState] = {}
        self._last_sweep = clock()

    def get(self, user_id: str) -> SessionState:
        """Return the state for a user, creating it on first use."""
        now = self._clock()
        if now - self._last_sweep >= self.idle_ttl / 10:
            self.evict_idle(now)

        session = self._sessions.get(user_id)
        if session is None:
            session = SessionState(user_id=user_id)
            self._sessions[user_id] = session
            logger.debug(f"Session state created for user {user_id}")
        session.last_seen = now

        if len(self._sessions) > self.max_sessions:
            self._evict_oldest(len(self._sessions) - self.max_sessions, keep=user_id)
        return session

    def peek(self, user_id: str) -> Optional[SessionState]:
        return self._sessions.get(user_id)

    def __len__(self) -> int:
        return len(self._sessions)

    @staticmethod
    def _in_flight(session: SessionState) -> bool:
        return session.is_fit_loading or session.transcript.awaiting_response

    @staticmethod
    def _release(session: SessionState) -> None:
        if session.medication_sync is not None:
            session.medication_sync.stop()
            session.medication_sync = None

    def evict_idle(self, now: Optional[float] = None) -> int:
        """
        Drop sessions idle for longer than ``idle_ttl``.

        Returns:
            int: Number of sessions evicted
        """
        now = self._clock() if now is None else now
        self._last_sweep = now
        expired = [
            user_id for user_id, session in self._sessions.items()
            if now - session.last_seen > self.idle_ttl
            and not self._in_flight(session)
        ]
        for user_id in expired:
            self._release(self._sessions.pop(user_id))
        if expired:
            logger.info(f"Evicted {len(expired)} idle sessions, {len(self._sessions)} remain")
        return len(expired)

    def _evict_oldest(self, count: int, keep: str) -> None:
        candidates = sorted(
            (s for s in self._sessions.values() if s.user_id != keep and not self._in_flight(s)),
            key=lambda s: s.last_seen,
        )
        for session in candidates[:count]:
            self._release(self._sessions.pop(session.user_id))
        logger.info(f"Session limit reached, evicted {min(count, len(candidates))} least recently seen")

    def close(self) -> None:
        """Stop every live medication view and forget all sessions."""
        for session in self._sessions.values():
            self._release(session)
        self._sessions.clear()
