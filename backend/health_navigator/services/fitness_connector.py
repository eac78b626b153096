"""
Fitness Connector - Binds the Google Fit client to a user's session.
"""

import logging

from ..core.exceptions import BusyError, FitnessNotConnectedError, FitnessTokenExpiredError
from ..models import Notice, StepCount
from .google_fit import GoogleFitClient
from .session_state import SessionState

logger = logging.getLogger(__name__)

CONNECTED_TEXT = "Google Fit connected! Token received. Now fetch your activity."


class FitnessConnector:
    """
    Holds the session-scoped token lifecycle: accept from a redirect,
    use for fetches, drop on expiry or disconnect.
    """

    def __init__(self, client: GoogleFitClient):
        self.client = client

    def connect_url(self) -> str:
        """Consent URL the browser should be sent to."""
        return self.client.build_authorization_url()

    def accept_redirect(self, session: SessionState, fragment: str) -> Notice:
        """
        Store the token carried by a redirect fragment.

        The session token is left untouched when the fragment is rejected.

        Raises:
            InvalidRedirectError: If the fragment fails validation
        """
        token = self.client.parse_redirect_fragment(fragment)
        session.fitness_token = token
        logger.info(f"Google Fit token accepted for user {session.user_id}")
        return Notice.success(CONNECTED_TEXT)

    def disconnect(self, session: SessionState) -> None:
        session.fitness_token = None
        session.step_count = None

    async def fetch_steps(self, session: SessionState) -> StepCount:
        """
        Fetch yesterday's steps with the session token.

        On success the session step count is replaced. On 401 the token is
        cleared. Other failures leave both token and step count unchanged.

        Raises:
            FitnessNotConnectedError: If the session holds no token
            BusyError: If a fetch for this session is already running
            FitnessTokenExpiredError, FitnessAPIError: From the client
        """
        if not session.fitness_token:
            raise FitnessNotConnectedError()
        if session.is_fit_loading:
            raise BusyError("Activity fetch already in progress.")

        token = session.fitness_token
        session.is_fit_loading = True
        try:
            step_count = await self.client.fetch_yesterday_steps(token)
        except FitnessTokenExpiredError:
            if session.fitness_token == token:
                session.fitness_token = None
            logger.info(f"Google Fit token cleared for user {session.user_id}")
            raise
        finally:
            session.is_fit_loading = False

        session.step_count = step_count
        return step_count

    @staticmethod
    def fetched_notice(step_count: StepCount) -> Notice:
        return Notice.success(f"Fetched activity successfully! Yesterday's steps: {step_count.steps:,}.")
