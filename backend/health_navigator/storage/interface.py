"""
Document Store Interface - Abstract base class for all document store implementations.
This interface enables switching between Firestore and the local JSON store.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """A stored document: its identifier and field values."""
    id: str
    data: Dict[str, Any] = field(default_factory=dict)


SnapshotCallback = Callable[[List[Document]], None]


class Subscription:
    """
    Handle for a live query.

    Each delivered snapshot is the complete, ordered result set and replaces
    whatever the listener held before. After ``cancel()`` returns, the
    callback is never invoked again.
    """

    def __init__(self, callback: SnapshotCallback, on_cancel: Optional[Callable[[], None]] = None):
        self._callback = callback
        self._on_cancel = on_cancel
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def deliver(self, documents: List[Document]) -> None:
        """Hand a snapshot to the listener unless cancelled."""
        if self._cancelled:
            return
        try:
            self._callback(documents)
        except Exception:
            logger.error("Snapshot listener raised", exc_info=True)

    def cancel(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()


class DocumentStore(ABC):
    """
    Abstract document store. Collections are addressed by slash-separated
    paths such as ``artifacts/<app>/users/<uid>/medications``.
    """

    @abstractmethod
    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        """
        Create a document with a generated id.

        Values equal to ``SERVER_TIMESTAMP`` are replaced by the store's
        commit time.

        Returns:
            str: The new document id

        Raises:
            DocumentStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def get(self, collection_path: str, doc_id: str) -> Optional[Document]:
        """
        Read one document.

        Returns:
            Optional[Document]: The document, or None if it does not exist
        """
        pass

    @abstractmethod
    async def update(self, collection_path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
            DocumentStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, collection_path: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        pass

    @abstractmethod
    async def list(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Document]:
        """List documents in a collection, optionally ordered by a field."""
        pass

    @abstractmethod
    async def watch(
        self,
        collection_path: str,
        callback: SnapshotCallback,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> Subscription:
        """
        Subscribe to a live query over a collection.

        The initial snapshot is delivered on subscription; every confirmed
        change afterwards delivers a full snapshot. Callbacks run on the
        event loop thread.
        """
        pass

    async def close(self) -> None:
        """Release resources held by the store."""
        return None


class _ServerTimestamp:
    """Sentinel asking the store to stamp its own commit time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()
