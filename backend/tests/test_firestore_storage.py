"""
Tests for the Firestore document store.
Uses an in-memory stand-in for the Firestore client whose snapshot
listener fires from its own thread, like the real SDK.
"""

import asyncio
import threading
import time

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from health_navigator.core.exceptions import DocumentNotFoundError, DocumentStoreError
from health_navigator.services import MedicationStore, MedicationSync
from health_navigator.storage import SERVER_TIMESTAMP
from health_navigator.storage.firestore_storage import FirestoreDocumentStore


PATH = "artifacts/test-app/users/u1/medications"


class FakeSnapshot:
    def __init__(self, doc_id, data=None):
        self.id = doc_id
        self.exists = data is not None
        self._data = data

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeWatch:
    def __init__(self):
        self.unsubscribed = False

    def unsubscribe(self):
        self.unsubscribed = True


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._collection.docs.get(self.id))

    def update(self, fields):
        if self.id not in self._collection.docs:
            raise google_exceptions.NotFound(f"No document to update: {self.id}")
        self._collection.docs[self.id].update(fields)

    def delete(self):
        self._collection.docs.pop(self.id, None)


class FakeCollection:
    """Collection and query in one; ``on_snapshot`` answers from a listener thread."""

    def __init__(self, listener_delay=0.05, fire_on_listen=True):
        self.docs = {}
        self.order_by_args = None
        self.callbacks = []
        self.watches = []
        self.listener_delay = listener_delay
        self.fire_on_listen = fire_on_listen

    def order_by(self, field_path, direction=None):
        self.order_by_args = (field_path, direction)
        return self

    def add(self, data):
        doc_id = f"doc{len(self.docs) + 1}"
        self.docs[doc_id] = dict(data)
        return None, FakeDocumentRef(self, doc_id)

    def document(self, doc_id):
        return FakeDocumentRef(self, doc_id)

    def snapshots(self):
        return [FakeSnapshot(doc_id, data) for doc_id, data in self.docs.items()]

    def stream(self):
        return iter(self.snapshots())

    def on_snapshot(self, callback):
        self.callbacks.append(callback)
        watch = FakeWatch()
        self.watches.append(watch)
        if self.fire_on_listen:
            threading.Thread(target=self._fire_later, args=(callback,), daemon=True).start()
        return watch

    def _fire_later(self, callback):
        time.sleep(self.listener_delay)
        callback(self.snapshots(), [], None)


class FakeFirestoreClient:
    def __init__(self, **collection_options):
        self.collections = {}
        self.closed = False
        self._collection_options = collection_options

    def collection(self, *parts):
        path = "/".join(parts)
        if path not in self.collections:
            self.collections[path] = FakeCollection(**self._collection_options)
        return self.collections[path]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_client():
    return FakeFirestoreClient()


@pytest.fixture
def store(fake_client):
    return FirestoreDocumentStore(fake_client)


class TestFirestoreDocumentStore:

    @pytest.mark.asyncio
    async def test_add_translates_server_timestamp(self, store, fake_client):
        doc_id = await store.add(PATH, {"name": "Aspirin", "createdAt": SERVER_TIMESTAMP})

        stored = fake_client.collections[PATH].docs[doc_id]
        assert stored["name"] == "Aspirin"
        assert stored["createdAt"] is firestore.SERVER_TIMESTAMP

    @pytest.mark.asyncio
    async def test_get(self, store):
        doc_id = await store.add(PATH, {"name": "Aspirin"})

        doc = await store.get(PATH, doc_id)

        assert doc.id == doc_id
        assert doc.data == {"name": "Aspirin"}
        assert await store.get(PATH, "missing") is None

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, store):
        with pytest.raises(DocumentNotFoundError):
            await store.update(PATH, "missing", {"isTaken": True})

    @pytest.mark.asyncio
    async def test_api_errors_become_store_errors(self, store, fake_client):
        def _fail(data):
            raise google_exceptions.ServiceUnavailable("backend down")

        fake_client.collection(*PATH.split("/")).add = _fail

        with pytest.raises(DocumentStoreError):
            await store.add(PATH, {"name": "Aspirin"})

    @pytest.mark.asyncio
    async def test_list_orders_descending(self, store, fake_client):
        await store.add(PATH, {"name": "Aspirin"})

        docs = await store.list(PATH, order_by="createdAt", descending=True)

        assert [d.data["name"] for d in docs] == ["Aspirin"]
        assert fake_client.collections[PATH].order_by_args == ("createdAt", firestore.Query.DESCENDING)

    @pytest.mark.asyncio
    async def test_close_unsubscribes_and_closes_client(self, store, fake_client):
        await store.watch(PATH, lambda docs: None)

        await store.close()

        assert fake_client.collections[PATH].watches[0].unsubscribed is True
        assert fake_client.closed is True


class TestFirestoreWatch:

    @pytest.mark.asyncio
    async def test_snapshot_delivered_on_event_loop_thread(self, store, fake_client):
        await store.add(PATH, {"name": "Aspirin"})
        delivered = asyncio.Event()
        received = []

        def on_docs(docs):
            received.append((threading.get_ident(), [d.data["name"] for d in docs]))
            delivered.set()

        await store.watch(PATH, on_docs, order_by="createdAt", descending=True)
        await asyncio.wait_for(delivered.wait(), timeout=2.0)

        assert received == [(threading.get_ident(), ["Aspirin"])]

    @pytest.mark.asyncio
    async def test_no_delivery_after_cancel(self):
        client = FakeFirestoreClient(fire_on_listen=False)
        store = FirestoreDocumentStore(client)
        received = []

        subscription = await store.watch(PATH, received.append)
        collection = client.collections[PATH]

        # Snapshot already handed to the loop when cancel happens
        collection.callbacks[0]([FakeSnapshot("doc1", {"name": "Aspirin"})], [], None)
        subscription.cancel()
        await asyncio.sleep(0.05)

        assert received == []
        assert collection.watches[0].unsubscribed is True

    @pytest.mark.asyncio
    async def test_listener_thread_after_cancel_is_dropped(self):
        client = FakeFirestoreClient(fire_on_listen=False)
        store = FirestoreDocumentStore(client)
        received = []

        subscription = await store.watch(PATH, received.append)
        subscription.cancel()

        listener = threading.Thread(
            target=client.collections[PATH].callbacks[0],
            args=([FakeSnapshot("doc1", {"name": "Aspirin"})], [], None),
        )
        listener.start()
        listener.join()
        await asyncio.sleep(0.05)

        assert received == []


class TestMedicationSyncOnFirestore:

    @pytest.mark.asyncio
    async def test_start_waits_for_first_snapshot(self, store, fake_client):
        medications = MedicationStore(store, "test-app")
        fake_client.collection(*PATH.split("/")).docs["m1"] = {
            "name": "Aspirin", "dose": "81mg", "time": "08:00", "isTaken": False,
        }
        sync = MedicationSync(medications, "u1")

        await sync.start()

        assert [r.id for r in sync.records] == ["m1"]
        assert sync.snapshots_received == 1
        sync.stop()

    @pytest.mark.asyncio
    async def test_start_gives_up_after_timeout(self):
        store = FirestoreDocumentStore(FakeFirestoreClient(fire_on_listen=False))
        sync = MedicationSync(MedicationStore(store, "test-app"), "u1")

        await sync.start(timeout=0.05)

        assert sync.is_running
        assert sync.records == []
        assert sync.snapshots_received == 0
        sync.stop()

    @pytest.mark.asyncio
    async def test_stop_unsubscribes_listener(self, store, fake_client):
        sync = MedicationSync(MedicationStore(store, "test-app"), "u1")
        await sync.start()

        sync.stop()

        assert fake_client.collections[PATH].watches[0].unsubscribed is True
        assert not sync.is_running
