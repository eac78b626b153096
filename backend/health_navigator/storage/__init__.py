"""Storage module - document store interface and implementations."""

from .interface import DocumentStore, Document, Subscription, SnapshotCallback, SERVER_TIMESTAMP
from .local_storage import LocalDocumentStore
from .factory import create_document_store

__all__ = [
    'DocumentStore', 'Document', 'Subscription', 'SnapshotCallback', 'SERVER_TIMESTAMP',
    'LocalDocumentStore', 'create_document_store',
]
