"""
Document Store Factory - Creates the configured document store instance.
"""

from ..config import Settings
from .interface import DocumentStore
from .local_storage import LocalDocumentStore


def create_document_store(settings: Settings) -> DocumentStore:
    """
    Create a document store based on configuration.

    Args:
        settings: Application settings (``document_store`` selects the backend)

    Returns:
        DocumentStore instance

    Raises:
        ValueError: If the configured backend is unknown
    """
    if settings.document_store == "local":
        return LocalDocumentStore(settings.local_storage_path)

    elif settings.document_store == "firestore":
        # Imported lazily so local development does not need Google credentials
        from .firestore_storage import FirestoreDocumentStore, init_firebase_app

        app = init_firebase_app(settings.firebase_credentials_path, settings.firebase_project_id)
        return FirestoreDocumentStore.from_app(app)

    else:
        raise ValueError(f"Unsupported document store: {settings.document_store}")
