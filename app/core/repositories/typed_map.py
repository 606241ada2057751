"""
Typed views over a KeyValueMap.

EntityMap stores one model per key; ListMap stores an ordered list of models
per parent key and is always read-modify-written as a whole. CounterMap keeps
a monotonic integer per key.
"""

from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel

from app.core.repositories.backends import KeyValueMap
from app.core.repositories.codec import ListCodec, RecordCodec
from app.core.repositories.exceptions import StoreBackendError

M = TypeVar("M", bound=BaseModel)


class EntityMap(Generic[M]):
    def __init__(self, backend: KeyValueMap, codec: RecordCodec[M]):
        self.backend = backend
        self.codec = codec

    def get(self, key: str) -> Optional[M]:
        raw = self.backend.get(key)
        return self.codec.decode(raw) if raw is not None else None

    def contains(self, key: str) -> bool:
        return self.backend.contains(key)

    def put(self, key: str, record: M) -> None:
        # Encode first so an oversized record never reaches the backend
        self.backend.put(key, self.codec.encode(record))

    def delete(self, key: str) -> bool:
        return self.backend.delete(key)

    def items(self) -> List[Tuple[str, M]]:
        return [(key, self.codec.decode(raw)) for key, raw in self.backend.items()]

    def values(self) -> List[M]:
        return [record for _, record in self.items()]

    def update(self, key: str, mutate: Callable[[Optional[M]], Optional[M]]) -> Optional[M]:
        """Atomic read-modify-write; ``mutate`` returning None deletes the key."""
        result: List[Optional[M]] = [None]

        def apply(raw: Optional[bytes]) -> Optional[bytes]:
            current = self.codec.decode(raw) if raw is not None else None
            updated = mutate(current)
            result[0] = updated
            return self.codec.encode(updated) if updated is not None else None

        self.backend.update(key, apply)
        return result[0]


class ListMap(Generic[M]):
    def __init__(self, backend: KeyValueMap, codec: ListCodec[M]):
        self.backend = backend
        self.codec = codec

    def get(self, key: str) -> List[M]:
        raw = self.backend.get(key)
        return self.codec.decode(raw) if raw is not None else []

    def has(self, key: str) -> bool:
        return self.backend.contains(key)

    def delete(self, key: str) -> bool:
        return self.backend.delete(key)

    def items(self) -> List[Tuple[str, List[M]]]:
        return [(key, self.codec.decode(raw)) for key, raw in self.backend.items()]

    def update(self, key: str, mutate: Callable[[List[M]], List[M]]) -> List[M]:
        """
        Atomic read-modify-write of the whole list.

        If ``mutate`` or encoding raises, nothing is written.
        """
        result: List[List[M]] = [[]]

        def apply(raw: Optional[bytes]) -> Optional[bytes]:
            current = self.codec.decode(raw) if raw is not None else []
            updated = mutate(current)
            encoded = self.codec.encode(updated)
            result[0] = updated
            return encoded

        self.backend.update(key, apply)
        return result[0]

    def keys(self) -> List[str]:
        return self.backend.keys()


class CounterMap:
    """
    Per-key high-water mark. Values only ever increase, including across
    deletes of whatever the counter numbers.
    """

    def __init__(self, backend: KeyValueMap):
        self.backend = backend

    @staticmethod
    def _decode(raw: Optional[bytes]) -> int:
        if raw is None:
            return 0
        try:
            return int(raw)
        except ValueError as e:
            raise StoreBackendError("Corrupt counter value") from e

    def get(self, key: str) -> int:
        return self._decode(self.backend.get(key))

    def advance(self, key: str, floor: int = 0) -> int:
        """Atomically issue the next value, never below ``floor + 1``."""
        issued = [0]

        def bump(raw: Optional[bytes]) -> bytes:
            issued[0] = max(self._decode(raw), floor) + 1
            return str(issued[0]).encode()

        self.backend.update(key, bump)
        return issued[0]
