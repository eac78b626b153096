"""
Local Filesystem Document Store.
Stores each document as a JSON file under ``<base_dir>/<collection_path>/``.
Used for development and tests in place of Firestore.
"""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles

from ..core.exceptions import DocumentNotFoundError, DocumentStoreError
from .interface import SERVER_TIMESTAMP, Document, DocumentStore, SnapshotCallback, Subscription

logger = logging.getLogger(__name__)


class LocalDocumentStore(DocumentStore):
    """
    Local filesystem document store.
    Live queries are served in-process: every write re-reads the collection
    and pushes a full snapshot to its watchers.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Args:
            base_dir: Base directory for all stored collections
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()
        self._watchers: Dict[str, List[tuple]] = {}

    def _get_collection_dir(self, collection_path: str) -> Path:
        """Convert a collection path to a directory within base_dir."""
        full_path = (self.base_dir / collection_path).resolve()

        # Security check: ensure path is within base_dir
        if not str(full_path).startswith(str(self.base_dir)):
            raise ValueError(f"Invalid path: {collection_path} - path traversal detected")

        return full_path

    def _get_document_path(self, collection_path: str, doc_id: str) -> Path:
        if not doc_id or "/" in doc_id or doc_id in (".", ".."):
            raise DocumentNotFoundError(f"Invalid document id: {doc_id!r}")
        return self._get_collection_dir(collection_path) / f"{doc_id}.json"

    @staticmethod
    def _resolve_sentinels(data: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return {key: now if value is SERVER_TIMESTAMP else value for key, value in data.items()}

    async def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        async with aiofiles.open(path, 'r', encoding='utf-8') as f:
            return json.loads(await f.read())

    async def _write(self, path: Path, data: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        try:
            async with self._lock:
                await self._write(
                    self._get_document_path(collection_path, doc_id),
                    self._resolve_sentinels(data),
                )
        except (OSError, TypeError) as e:
            raise DocumentStoreError(f"Failed to add document to {collection_path}: {e}") from e

        await self._notify(collection_path)
        return doc_id

    async def get(self, collection_path: str, doc_id: str) -> Optional[Document]:
        try:
            data = await self._read(self._get_document_path(collection_path, doc_id))
        except (OSError, json.JSONDecodeError) as e:
            raise DocumentStoreError(f"Failed to read {collection_path}/{doc_id}: {e}") from e
        return Document(id=doc_id, data=data) if data is not None else None

    async def update(self, collection_path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        path = self._get_document_path(collection_path, doc_id)
        try:
            async with self._lock:
                data = await self._read(path)
                if data is None:
                    raise DocumentNotFoundError(f"No document {doc_id} in {collection_path}")
                data.update(self._resolve_sentinels(fields))
                await self._write(path, data)
        except (OSError, json.JSONDecodeError) as e:
            raise DocumentStoreError(f"Failed to update {collection_path}/{doc_id}: {e}") from e

        await self._notify(collection_path)

    async def delete(self, collection_path: str, doc_id: str) -> None:
        path = self._get_document_path(collection_path, doc_id)
        try:
            async with self._lock:
                if not path.exists():
                    return
                path.unlink()
        except OSError as e:
            raise DocumentStoreError(f"Failed to delete {collection_path}/{doc_id}: {e}") from e

        await self._notify(collection_path)

    async def list(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Document]:
        collection_dir = self._get_collection_dir(collection_path)
        if not collection_dir.exists():
            return []

        documents = []
        try:
            for file_path in collection_dir.glob("*.json"):
                data = await self._read(file_path)
                if data is not None:
                    documents.append(Document(id=file_path.stem, data=data))
        except (OSError, json.JSONDecodeError) as e:
            raise DocumentStoreError(f"Failed to list {collection_path}: {e}") from e

        if order_by:
            # Missing values sort as the smallest, as in Firestore
            documents.sort(
                key=lambda doc: (doc.data.get(order_by) is not None, str(doc.data.get(order_by, ""))),
                reverse=descending,
            )
        return documents

    async def watch(
        self,
        collection_path: str,
        callback: SnapshotCallback,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> Subscription:
        entry: tuple = ()

        def _remove() -> None:
            watchers = self._watchers.get(collection_path, [])
            if entry in watchers:
                watchers.remove(entry)

        subscription = Subscription(callback, on_cancel=_remove)
        entry = (subscription, order_by, descending)
        self._watchers.setdefault(collection_path, []).append(entry)

        subscription.deliver(await self.list(collection_path, order_by, descending))
        return subscription

    async def _notify(self, collection_path: str) -> None:
        """Push a fresh snapshot to every watcher of a collection."""
        for subscription, order_by, descending in list(self._watchers.get(collection_path, [])):
            if not subscription.active:
                continue
            try:
                snapshot = await self.list(collection_path, order_by, descending)
            except DocumentStoreError:
                logger.error(f"Snapshot refresh failed for {collection_path}", exc_info=True)
                continue
            subscription.deliver(snapshot)

    async def close(self) -> None:
        for watchers in list(self._watchers.values()):
            for subscription, _, _ in list(watchers):
                subscription.cancel()
        self._watchers.clear()
