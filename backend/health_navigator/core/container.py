"""
Service Container - Builds and owns every long-lived service for one app instance.
Created in the FastAPI lifespan and stored on ``app.state.container``.
"""

import logging
from typing import Any, Optional

from ..config import Settings
from ..llm import LLMProvider, create_llm_provider
from ..services import (
    AssistantClient,
    FitnessConnector,
    GoogleFitClient,
    MedicationStore,
    MedicationSync,
    SessionRegistry,
)
from ..storage import DocumentStore, create_document_store
from ..utils.auth import IdentityProvider

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Explicit wiring of settings, storage, Google Fit and the LLM provider."""

    def __init__(
        self,
        settings: Settings,
        document_store: DocumentStore,
        llm_provider: Optional[LLMProvider] = None,
        fit_client: Optional[GoogleFitClient] = None,
        firebase_app: Optional[Any] = None,
    ):
        self.settings = settings
        self.document_store = document_store
        self.identity = IdentityProvider(settings, firebase_app)
        self.sessions = SessionRegistry(
            idle_ttl=settings.session_idle_minutes * 60,
            max_sessions=settings.max_sessions,
        )
        self.medications = MedicationStore(document_store, settings.app_id)
        self.fitness = FitnessConnector(fit_client or GoogleFitClient(
            client_id=settings.google_client_id,
            redirect_uri=settings.google_redirect_uri,
            timeout=settings.google_fit_timeout,
        ))
        self.assistant = AssistantClient(llm_provider)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        """Build the production wiring described by ``settings``."""
        firebase_app = None
        if settings.document_store == "firestore":
            from ..storage.firestore_storage import init_firebase_app
            firebase_app = init_firebase_app(settings.firebase_credentials_path, settings.firebase_project_id)

        llm_provider = create_llm_provider(
            "gemini",
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_timeout,
            log_calls=settings.log_llm_calls,
        )
        if llm_provider is None:
            logger.warning("GEMINI_API_KEY not set; the assistant will answer with a configuration notice")
        if not settings.google_client_id:
            logger.warning("GOOGLE_CLIENT_ID not set; Google Fit connect is disabled")

        return cls(
            settings=settings,
            document_store=create_document_store(settings),
            llm_provider=llm_provider,
            firebase_app=firebase_app,
        )

    async def medication_sync(self, user_id: str) -> MedicationSync:
        """Return the user's live medication view, starting it on first use."""
        session = self.sessions.get(user_id)
        if session.medication_sync is None:
            session.medication_sync = MedicationSync(self.medications, user_id)
        sync = session.medication_sync
        await sync.start()
        return sync

    async def aclose(self) -> None:
        """Stop live views and release the document store."""
        self.sessions.close()
        await self.document_store.close()
        logger.info("Service container closed")
