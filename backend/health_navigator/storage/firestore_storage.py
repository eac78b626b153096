"""
Firestore Document Store.
Wraps the blocking firebase-admin Firestore client: calls run in worker
threads and snapshot listeners are marshalled back onto the event loop.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from ..core.exceptions import DocumentNotFoundError, DocumentStoreError
from .interface import SERVER_TIMESTAMP, Document, DocumentStore, SnapshotCallback, Subscription

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "health-navigator"


def init_firebase_app(
    credentials_path: Optional[str] = None,
    project_id: Optional[str] = None,
) -> firebase_admin.App:
    """
    Initialize the named Firebase app once and return it.

    Args:
        credentials_path: Service account JSON; application default credentials if None
        project_id: Optional explicit project id
    """
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        pass

    cred = credentials.Certificate(credentials_path) if credentials_path else credentials.ApplicationDefault()
    options = {"projectId": project_id} if project_id else None
    app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
    logger.info(f"Firebase app initialized: project={project_id or 'default'}")
    return app


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by Cloud Firestore."""

    def __init__(self, client: Any):
        """
        Args:
            client: A ``google.cloud.firestore.Client`` (from ``firestore.client(app)``)
        """
        self._client = client
        self._subscriptions: List[Subscription] = []

    @classmethod
    def from_app(cls, app: firebase_admin.App) -> "FirestoreDocumentStore":
        return cls(firestore.client(app))

    def _collection(self, collection_path: str):
        return self._client.collection(*collection_path.split("/"))

    def _query(self, collection_path: str, order_by: Optional[str], descending: bool):
        query = self._collection(collection_path)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return query

    @staticmethod
    def _to_firestore(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: firestore.SERVER_TIMESTAMP if value is SERVER_TIMESTAMP else value
            for key, value in data.items()
        }

    @staticmethod
    def _to_document(snapshot: Any) -> Document:
        return Document(id=snapshot.id, data=snapshot.to_dict() or {})

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        try:
            _, ref = await asyncio.to_thread(
                self._collection(collection_path).add, self._to_firestore(data)
            )
        except google_exceptions.GoogleAPIError as e:
            raise DocumentStoreError(f"Failed to add document to {collection_path}: {e}") from e
        return ref.id

    async def get(self, collection_path: str, doc_id: str) -> Optional[Document]:
        try:
            snapshot = await asyncio.to_thread(self._collection(collection_path).document(doc_id).get)
        except google_exceptions.GoogleAPIError as e:
            raise DocumentStoreError(f"Failed to read {collection_path}/{doc_id}: {e}") from e
        return self._to_document(snapshot) if snapshot.exists else None

    async def update(self, collection_path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        ref = self._collection(collection_path).document(doc_id)
        try:
            await asyncio.to_thread(ref.update, self._to_firestore(fields))
        except google_exceptions.NotFound as e:
            raise DocumentNotFoundError(f"No document {doc_id} in {collection_path}") from e
        except google_exceptions.GoogleAPIError as e:
            raise DocumentStoreError(f"Failed to update {collection_path}/{doc_id}: {e}") from e

    async def delete(self, collection_path: str, doc_id: str) -> None:
        ref = self._collection(collection_path).document(doc_id)
        try:
            await asyncio.to_thread(ref.delete)
        except google_exceptions.GoogleAPIError as e:
            raise DocumentStoreError(f"Failed to delete {collection_path}/{doc_id}: {e}") from e

    async def list(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Document]:
        query = self._query(collection_path, order_by, descending)
        try:
            snapshots = await asyncio.to_thread(lambda: list(query.stream()))
        except google_exceptions.GoogleAPIError as e:
            raise DocumentStoreError(f"Failed to list {collection_path}: {e}") from e
        return [self._to_document(snapshot) for snapshot in snapshots]

    async def watch(
        self,
        collection_path: str,
        callback: SnapshotCallback,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> Subscription:
        loop = asyncio.get_running_loop()
        handles: list = []

        def _unsubscribe() -> None:
            for handle in handles:
                handle.unsubscribe()
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        subscription = Subscription(callback, on_cancel=_unsubscribe)

        # Runs on a Firestore listener thread
        def _on_snapshot(doc_snapshots, changes, read_time):
            documents = [self._to_document(snapshot) for snapshot in doc_snapshots]
            if subscription.active and not loop.is_closed():
                loop.call_soon_threadsafe(subscription.deliver, documents)

        query = self._query(collection_path, order_by, descending)
        try:
            handles.append(await asyncio.to_thread(query.on_snapshot, _on_snapshot))
        except google_exceptions.GoogleAPIError as e:
            raise DocumentStoreError(f"Failed to watch {collection_path}: {e}") from e

        self._subscriptions.append(subscription)
        return subscription

    async def close(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.cancel()
        await asyncio.to_thread(self._client.close)
