"""
Tests for the persistent-map substrate.

Run with: pytest tests/test_backends.py -v
"""

import threading
from typing import Dict, Optional
from unittest.mock import MagicMock, patch

import pytest
from google.cloud import firestore

from app.core.repositories.backends import (
    FirestoreMap,
    FirestoreMapFactory,
    InMemoryMap,
    InMemoryMapFactory,
    KeyedLocks,
    create_map_factory,
)
from app.core.repositories.codec import FOLLOW_LIST_CODEC
from app.core.repositories.exceptions import NotFoundError, StoreBackendError
from app.core.repositories.models import FollowRelationship
from app.core.repositories.typed_map import CounterMap, ListMap
from app.core.store import SocialStore


# ============== Minimal Firestore stand-in ==============

class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[dict]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, docs: Dict[str, dict], doc_id: str):
        self.docs = docs
        self.doc_id = doc_id

    def get(self, transaction=None) -> FakeSnapshot:
        return FakeSnapshot(self.doc_id, self.docs.get(self.doc_id))

    def set(self, data: dict) -> None:
        self.docs[self.doc_id] = dict(data)

    def delete(self) -> None:
        self.docs.pop(self.doc_id, None)


class FakeCollection:
    def __init__(self):
        self.docs: Dict[str, dict] = {}

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self.docs, doc_id)

    def stream(self):
        return [FakeSnapshot(doc_id, data) for doc_id, data in list(self.docs.items())]


class FakeTransaction:
    def set(self, doc_ref: FakeDocument, data: dict) -> None:
        doc_ref.set(data)

    def delete(self, doc_ref: FakeDocument) -> None:
        doc_ref.delete()


class FakeFirestore:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    def transaction(self) -> FakeTransaction:
        return FakeTransaction()


@pytest.fixture
def no_retry_transactions():
    """Run transactional functions once, directly against the fake."""
    with patch.object(firestore, "transactional", lambda fn: fn):
        yield


@pytest.fixture
def fake_db():
    return FakeFirestore()


# ============== Tests ==============

@pytest.fixture(params=["memory", "firestore"])
def kv(request, fake_db, no_retry_transactions):
    if request.param == "memory":
        return InMemoryMap("things")
    return FirestoreMap("things", fake_db, prefix="test_")


class TestKeyValueMap:
    """Contract shared by both backends."""

    def test_get_put(self, kv):
        assert kv.get("a") is None
        kv.put("a", b"1")
        assert kv.get("a") == b"1"
        assert kv.contains("a")

    def test_delete_reports_presence(self, kv):
        kv.put("a", b"1")
        assert kv.delete("a") is True
        assert kv.delete("a") is False
        assert kv.get("a") is None

    def test_items_in_key_order(self, kv):
        for key in ("b", "c", "a"):
            kv.put(key, key.encode())
        assert kv.items() == [("a", b"a"), ("b", b"b"), ("c", b"c")]
        assert kv.keys() == ["a", "b", "c"]

    def test_update_insert_modify_delete(self, kv):
        assert kv.update("a", lambda current: b"1" if current is None else None) == b"1"
        assert kv.update("a", lambda current: current + b"2") == b"12"
        assert kv.get("a") == b"12"
        assert kv.update("a", lambda current: None) is None
        assert not kv.contains("a")

    def test_failed_mutation_writes_nothing(self, kv):
        kv.put("a", b"1")

        def boom(current):
            raise NotFoundError("nope")

        with pytest.raises(NotFoundError):
            kv.update("a", boom)
        assert kv.get("a") == b"1"

    def test_awkward_keys(self, kv):
        for key in ("a/b", ".", "..", "x:y", "%2E"):
            kv.put(key, key.encode())
        assert sorted(key for key, _ in kv.items()) == sorted(["a/b", ".", "..", "x:y", "%2E"])
        assert kv.get("..") == b".."


class TestFirestoreMap:
    def test_collection_prefix(self, fake_db):
        FirestoreMap("videos", fake_db, prefix="reelstore_").put("v1", b"x")
        assert "reelstore_videos" in fake_db.collections

    def test_document_shape(self, fake_db):
        FirestoreMap("videos", fake_db).put("a/b", b"x")
        assert fake_db.collection("videos").docs == {"a%2Fb": {"key": "a/b", "value": b"x"}}

    def test_client_errors_are_wrapped(self):
        db = MagicMock()
        db.collection.return_value.document.return_value.get.side_effect = RuntimeError("unavailable")

        with pytest.raises(StoreBackendError) as exc_info:
            FirestoreMap("videos", db).get("v1")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_store_runs_on_firestore(self, fake_db, no_retry_transactions, alice, bob):
        store = SocialStore(maps=FirestoreMapFactory(db=fake_db, prefix="t_"))
        store.create_video(alice, "v1", "Cat jumps", tags=["cat"])
        store.post_comment(bob, "v1", "nice")
        store.follow_user(bob, "alice")

        assert [c.text for c in store.get_comments("v1")] == ["nice"]
        assert store.get_followers("alice") == ["bob"]
        assert set(fake_db.collections) >= {"t_videos", "t_comments", "t_follow_relationships"}


class TestFactories:
    def test_memory_factory_reuses_maps(self):
        factory = InMemoryMapFactory()
        assert factory.open("videos") is factory.open("videos")

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_map_factory("cassandra")

    def test_memory_backend(self):
        assert isinstance(create_map_factory("memory"), InMemoryMapFactory)


class TestInMemoryLocking:
    def test_locks_are_released_with_their_keys(self):
        kv = InMemoryMap("edges")
        for index in range(50):
            kv.put(f"k{index}", b"1")
            kv.update(f"k{index}", lambda current: None)
            kv.delete(f"k{index}")
        assert len(kv._key_locks) == 0

    def test_lock_dropped_after_failed_mutation(self):
        locks = KeyedLocks()
        with pytest.raises(NotFoundError):
            with locks.hold("k"):
                assert len(locks) == 1
                raise NotFoundError("nope")
        assert len(locks) == 0

    def test_concurrent_updates_are_serialised(self):
        kv = InMemoryMap("counter")
        kv.put("n", b"0")

        def work():
            for _ in range(200):
                kv.update("n", lambda current: str(int(current) + 1).encode())

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert kv.get("n") == b"1600"
        assert len(kv._key_locks) == 0


class TestTypedMaps:
    def test_list_map_keys(self):
        edges = ListMap(InMemoryMap("edges"), FOLLOW_LIST_CODEC)
        edge = FollowRelationship(follower_principal="x", followed_principal="y", timestamp=1)
        for key in ("b:c", "a:b"):
            edges.update(key, lambda current: [edge])
        assert edges.keys() == ["a:b", "b:c"]

    def test_counter_only_increases(self):
        counters = CounterMap(InMemoryMap("seq"))
        assert counters.get("v1") == 0
        assert counters.advance("v1") == 1
        assert counters.advance("v1") == 2
        assert counters.advance("v1", floor=10) == 11
        assert counters.advance("v1", floor=3) == 12
        assert counters.advance("v2") == 1

    def test_corrupt_counter(self):
        backend = InMemoryMap("seq")
        backend.put("v1", b"nan?")
        with pytest.raises(StoreBackendError):
            CounterMap(backend).advance("v1")
