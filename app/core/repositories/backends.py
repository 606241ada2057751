"""
Persistent-map substrate for the social store.

A KeyValueMap is a named map from string keys to encoded bytes with one
atomic primitive, ``update(key, mutate)``, used for every read-modify-write.
Two backends are provided:

- InMemoryMap: ordered in-process map with per-key locks (default, tests)
- FirestoreMap: one Firestore collection per map, updates run inside a
  Firestore transaction so concurrent writers retry instead of losing writes
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote

from google.cloud import firestore

from app.core.repositories.exceptions import RepositoryError, StoreBackendError

logger = logging.getLogger(__name__)

# Receives the current value (None if absent); returns the new value, or None to delete
Mutator = Callable[[Optional[bytes]], Optional[bytes]]


class KeyValueMap(ABC):
    """Named durable map of bytes values."""

    name: str

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        ...

    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key; returns whether it was present."""

    @abstractmethod
    def items(self) -> List[Tuple[str, bytes]]:
        """Snapshot of all entries in ascending key order."""

    @abstractmethod
    def update(self, key: str, mutate: Mutator) -> Optional[bytes]:
        """Atomically apply ``mutate`` to the value under ``key``."""

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def keys(self) -> List[str]:
        return [key for key, _ in self.items()]


class KeyedLocks:
    """
    Mutex per key, created on first use and dropped once no thread holds or
    waits on it, so the table only covers keys in flight.
    """

    def __init__(self) -> None:
        # key -> [lock, number of holders and waiters]
        self._locks: Dict[str, List[Any]] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class InMemoryMap(KeyValueMap):
    """In-process ordered map. Iteration is by ascending key, like a B-tree map."""

    def __init__(self, name: str):
        self.name = name
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()
        self._key_locks = KeyedLocks()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._key_locks.hold(key):
            self._store(key, value)

    def delete(self, key: str) -> bool:
        with self._key_locks.hold(key):
            return self._remove(key)

    def items(self) -> List[Tuple[str, bytes]]:
        with self._lock:
            return sorted(self._data.items())

    def update(self, key: str, mutate: Mutator) -> Optional[bytes]:
        with self._key_locks.hold(key):
            new_value = mutate(self.get(key))
            if new_value is None:
                self._remove(key)
            else:
                self._store(key, new_value)
            return new_value

    def _store(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = value

    def _remove(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class FirestoreMap(KeyValueMap):
    """
    Firestore-backed map.

    Each entry is a document ``{"key": <original key>, "value": <bytes>}``.
    Document ids are the percent-encoded key so any key is a legal id.
    """

    KEY_FIELD = "key"
    VALUE_FIELD = "value"

    def __init__(self, name: str, db: Any, prefix: str = ""):
        self.name = name
        self.db = db
        self.collection = db.collection(f"{prefix}{name}")

    @staticmethod
    def _doc_id(key: str) -> str:
        # "." and ".." are reserved document ids
        return quote(key, safe="").replace(".", "%2E")

    def _doc(self, key: str):
        return self.collection.document(self._doc_id(key))

    @contextmanager
    def _wrap(self, action: str, key: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except RepositoryError:
            raise
        except Exception as e:
            logger.error(
                f"Firestore {action} failed on {self.name}/{key}: {e}", exc_info=True
            )
            raise StoreBackendError(f"Failed to {action} {self.name}: {e}") from e

    def get(self, key: str) -> Optional[bytes]:
        with self._wrap("get", key):
            doc = self._doc(key).get()
            if not doc.exists:
                return None
            data = doc.to_dict() or {}
            return data.get(self.VALUE_FIELD)

    def put(self, key: str, value: bytes) -> None:
        with self._wrap("put", key):
            self._doc(key).set({self.KEY_FIELD: key, self.VALUE_FIELD: value})

    def delete(self, key: str) -> bool:
        with self._wrap("delete", key):
            doc_ref = self._doc(key)
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
            return True

    def items(self) -> List[Tuple[str, bytes]]:
        with self._wrap("scan"):
            entries = []
            for doc in self.collection.stream():
                data = doc.to_dict() or {}
                if self.VALUE_FIELD in data:
                    entries.append((data.get(self.KEY_FIELD, doc.id), data[self.VALUE_FIELD]))
            return sorted(entries)

    def update(self, key: str, mutate: Mutator) -> Optional[bytes]:
        doc_ref = self._doc(key)

        @firestore.transactional
        def apply(transaction) -> Optional[bytes]:
            snapshot = doc_ref.get(transaction=transaction)
            current = None
            if snapshot.exists:
                current = (snapshot.to_dict() or {}).get(self.VALUE_FIELD)
            new_value = mutate(current)
            if new_value is None:
                if snapshot.exists:
                    transaction.delete(doc_ref)
            else:
                transaction.set(doc_ref, {self.KEY_FIELD: key, self.VALUE_FIELD: new_value})
            return new_value

        with self._wrap("update", key):
            return apply(self.db.transaction())


class MapFactory(ABC):
    """Opens named maps on one substrate."""

    @abstractmethod
    def open(self, name: str) -> KeyValueMap:
        ...


class InMemoryMapFactory(MapFactory):
    def __init__(self) -> None:
        self._maps: Dict[str, InMemoryMap] = {}

    def open(self, name: str) -> KeyValueMap:
        if name not in self._maps:
            self._maps[name] = InMemoryMap(name)
        return self._maps[name]


class FirestoreMapFactory(MapFactory):
    def __init__(self, db: Any = None, prefix: str = ""):
        if db is None:
            from app.core.firebase_client import get_firestore_client
            db = get_firestore_client()
        self.db = db
        self.prefix = prefix

    def open(self, name: str) -> KeyValueMap:
        return FirestoreMap(name, self.db, prefix=self.prefix)


def create_map_factory(backend: str, prefix: str = "") -> MapFactory:
    """Build the substrate named by ``backend`` ("memory" or "firestore")."""
    if backend == "memory":
        return InMemoryMapFactory()
    if backend == "firestore":
        return FirestoreMapFactory(prefix=prefix)
    raise ValueError(f"Unknown store backend: {backend}")
