"""
Byte codecs for stored records.

Records are stored as compact JSON arrays of field values in model field
order, which keeps every row well under its declared bound. Each codec
enforces a maximum serialized size; encoding past the bound raises
SizeLimitExceededError instead of truncating.
"""

from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import from_json, to_json

from app.core.repositories.exceptions import SizeLimitExceededError, StoreBackendError
from app.core.repositories.models import (
    Comment,
    FollowRelationship,
    TipRecord,
    UserProfile,
    VideoMetadata,
    WatchEvent,
)

M = TypeVar("M", bound=BaseModel)

# Per-record bounds (bytes)
PROFILE_MAX_SIZE = 500
VIDEO_MAX_SIZE = 1000
TIP_MAX_SIZE = 500
WATCH_EVENT_MAX_SIZE = 100
COMMENT_MAX_SIZE = 2000

# List-wrapper bounds (bytes)
TIP_LIST_MAX_SIZE = 10_000
WATCH_LIST_MAX_SIZE = 10_000
FOLLOW_LIST_MAX_SIZE = 10_000
COMMENT_LIST_MAX_SIZE = 20_000


def _check_size(what: str, raw: bytes, limit: Optional[int]) -> bytes:
    if limit is not None and len(raw) > limit:
        raise SizeLimitExceededError(what, len(raw), limit)
    return raw


class RecordCodec(Generic[M]):
    """Encodes a single model instance to bytes and back."""

    def __init__(self, model: Type[M], max_size: Optional[int] = None):
        self.model = model
        self.max_size = max_size
        self.fields = list(model.model_fields)
        self.name = model.__name__

    def to_row(self, record: M) -> List[Any]:
        data = record.model_dump(mode="json")
        return [data[field] for field in self.fields]

    def from_row(self, row: Any) -> M:
        if not isinstance(row, list) or len(row) != len(self.fields):
            raise StoreBackendError(f"Malformed {self.name} row")
        try:
            return self.model.model_validate(dict(zip(self.fields, row)))
        except PydanticValidationError as e:
            raise StoreBackendError(f"Corrupt {self.name} row: {e}") from e

    def encode(self, record: M) -> bytes:
        return _check_size(self.name, to_json(self.to_row(record)), self.max_size)

    def check(self, record: M) -> None:
        """Raise SizeLimitExceededError if the record alone is over its bound."""
        self.encode(record)

    def decode(self, raw: bytes) -> M:
        try:
            row = from_json(raw)
        except ValueError as e:
            raise StoreBackendError(f"Undecodable {self.name} bytes") from e
        return self.from_row(row)


class ListCodec(Generic[M]):
    """Encodes an ordered list of records as one bounded value."""

    def __init__(self, item: RecordCodec[M], max_size: int):
        self.item = item
        self.max_size = max_size
        self.name = f"{item.name}List"

    def encode(self, records: Sequence[M]) -> bytes:
        raw = to_json([self.item.to_row(record) for record in records])
        return _check_size(self.name, raw, self.max_size)

    def decode(self, raw: bytes) -> List[M]:
        try:
            rows = from_json(raw)
        except ValueError as e:
            raise StoreBackendError(f"Undecodable {self.name} bytes") from e
        if not isinstance(rows, list):
            raise StoreBackendError(f"Malformed {self.name}")
        return [self.item.from_row(row) for row in rows]


PROFILE_CODEC = RecordCodec(UserProfile, PROFILE_MAX_SIZE)
VIDEO_CODEC = RecordCodec(VideoMetadata, VIDEO_MAX_SIZE)
COMMENT_CODEC = RecordCodec(Comment, COMMENT_MAX_SIZE)
TIP_CODEC = RecordCodec(TipRecord, TIP_MAX_SIZE)
WATCH_EVENT_CODEC = RecordCodec(WatchEvent, WATCH_EVENT_MAX_SIZE)
FOLLOW_CODEC = RecordCodec(FollowRelationship)

COMMENT_LIST_CODEC = ListCodec(COMMENT_CODEC, COMMENT_LIST_MAX_SIZE)
TIP_LIST_CODEC = ListCodec(TIP_CODEC, TIP_LIST_MAX_SIZE)
WATCH_LIST_CODEC = ListCodec(WATCH_EVENT_CODEC, WATCH_LIST_MAX_SIZE)
FOLLOW_LIST_CODEC = ListCodec(FOLLOW_CODEC, FOLLOW_LIST_MAX_SIZE)
