"""
Medication Store - Per-user medication reminders in the document store,
plus the live, newest-first view kept in sync with it.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from ..core.exceptions import (
    DocumentNotFoundError,
    DocumentStoreError,
    NotFoundError,
    ValidationError,
)
from ..core.logging_config import LoggerAdapter
from ..models import Medication
from ..storage import SERVER_TIMESTAMP, Document, DocumentStore, Subscription

logger = logging.getLogger(__name__)

MedicationListener = Callable[[List[Medication]], None]


class MedicationStore:
    """
    CRUD over ``artifacts/{app_id}/users/{user_id}/medications``.
    Every operation is scoped to one user; nothing reads across users.
    """

    COLLECTION = "medications"
    ORDER_FIELD = "createdAt"

    def __init__(self, document_store: DocumentStore, app_id: str):
        self._store = document_store
        self.app_id = app_id

    def scope_path(self, user_id: str) -> str:
        """Collection path owned by ``user_id``."""
        if not user_id:
            raise ValidationError("A signed-in user is required.")
        return f"artifacts/{self.app_id}/users/{user_id}/{self.COLLECTION}"

    def _log(self, user_id: str) -> LoggerAdapter:
        return LoggerAdapter(logger, {"user_id": user_id})

    @staticmethod
    def to_records(documents: List[Document]) -> List[Medication]:
        return [Medication.from_document(doc.id, doc.data) for doc in documents]

    async def create(self, user_id: str, name: str, dose: str, time: str) -> str:
        """
        Add a reminder with ``isTaken`` false and a server-assigned ``createdAt``.

        Returns:
            str: The new record id

        Raises:
            ValidationError: If any field is empty after trimming
            DocumentStoreError: If the write fails
        """
        name, dose, time = (name or "").strip(), (dose or "").strip(), (time or "").strip()
        if not name or not dose or not time:
            raise ValidationError("All fields are required.")

        path = self.scope_path(user_id)
        try:
            record_id = await self._store.add(path, {
                "name": name,
                "dose": dose,
                "time": time,
                "isTaken": False,
                "createdAt": SERVER_TIMESTAMP,
            })
        except DocumentStoreError as e:
            self._log(user_id).error(f"Error adding medication: {e}")
            raise DocumentStoreError("Failed to add medication.") from e

        self._log(user_id).info(f"Medication added: {record_id}")
        return record_id

    async def toggle_taken(self, user_id: str, record_id: str) -> bool:
        """
        Flip ``isTaken`` on one record.

        Returns:
            bool: The new ``isTaken`` value

        Raises:
            NotFoundError: If the record does not exist
            DocumentStoreError: If the write fails
        """
        path = self.scope_path(user_id)
        try:
            document = await self._store.get(path, record_id)
            if document is None:
                raise DocumentNotFoundError(f"No medication {record_id}")
            is_taken = not bool(document.data.get("isTaken", False))
            await self._store.update(path, record_id, {"isTaken": is_taken})
        except DocumentNotFoundError as e:
            raise NotFoundError("Medication not found.") from e
        except DocumentStoreError as e:
            self._log(user_id).error(f"Error updating medication {record_id}: {e}")
            raise DocumentStoreError("Failed to update status.") from e

        self._log(user_id).info(f"Medication {record_id} isTaken={is_taken}")
        return is_taken

    async def delete(self, user_id: str, record_id: str) -> None:
        """
        Remove one record. Deleting a record that is already gone succeeds.

        Raises:
            DocumentStoreError: If the delete fails
        """
        path = self.scope_path(user_id)
        try:
            await self._store.delete(path, record_id)
        except DocumentNotFoundError:
            return
        except DocumentStoreError as e:
            self._log(user_id).error(f"Error deleting medication {record_id}: {e}")
            raise DocumentStoreError("Failed to delete item.") from e

        self._log(user_id).info(f"Medication deleted: {record_id}")

    async def list(self, user_id: str) -> List[Medication]:
        """One-shot read of the user's records, newest first."""
        documents = await self._store.list(self.scope_path(user_id), order_by=self.ORDER_FIELD, descending=True)
        return self.to_records(documents)

    async def subscribe(self, user_id: str, listener: MedicationListener) -> Subscription:
        """
        Watch the user's records, newest first.

        ``listener`` receives the complete list on every confirmed change
        until the returned subscription is cancelled.
        """
        def _on_snapshot(documents: List[Document]) -> None:
            listener(self.to_records(documents))

        return await self._store.watch(
            self.scope_path(user_id),
            _on_snapshot,
            order_by=self.ORDER_FIELD,
            descending=True,
        )


class MedicationSync:
    """
    Live view of one user's medications.

    ``records`` always holds the latest complete snapshot; a new snapshot
    replaces the previous list in one assignment, never merged.
    """

    FIRST_SNAPSHOT_TIMEOUT = 10.0

    def __init__(self, medications: MedicationStore, user_id: str):
        self._medications = medications
        self.user_id = user_id
        self._records: List[Medication] = []
        self._subscription: Optional[Subscription] = None
        self._start_lock = asyncio.Lock()
        self._first_snapshot = asyncio.Event()
        self.snapshots_received = 0

    @property
    def is_running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @property
    def records(self) -> List[Medication]:
        return list(self._records)

    def _apply_snapshot(self, records: List[Medication]) -> None:
        self._records = records
        self.snapshots_received += 1
        self._first_snapshot.set()

    async def start(self, timeout: Optional[float] = None) -> None:
        """
        Begin watching and wait until the first snapshot has been applied.
        A no-op while already running; concurrent callers share one watch.
        """
        async with self._start_lock:
            if not self.is_running:
                self._first_snapshot.clear()
                self._subscription = await self._medications.subscribe(self.user_id, self._apply_snapshot)
                logger.info(f"Medication sync started for user {self.user_id}")

        timeout = self.FIRST_SNAPSHOT_TIMEOUT if timeout is None else timeout
        try:
            await asyncio.wait_for(self._first_snapshot.wait(), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"No medication snapshot for user {self.user_id} after {timeout}s")

    def stop(self) -> None:
        """Cancel the watch. No snapshot is applied after this returns."""
        if self._subscription is None:
            return
        self._subscription.cancel()
        self._subscription = None
        self._first_snapshot.clear()
        logger.info(f"Medication sync stopped for user {self.user_id}")
