"""
Input Validation Module

Validates and sanitizes user inputs before they reach the store.
"""

import re
from typing import Iterable, List, Optional

from app.core.security.constants import (
    MAX_COMMENT_LENGTH,
    MAX_STORAGE_REF_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
    MAX_TX_HASH_LENGTH,
    MAX_USER_ID_LENGTH,
    MAX_VIDEO_ID_LENGTH,
)

_VIDEO_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
# Firebase uids and principal text forms (dash-separated groups)
_USER_ID_RE = re.compile(r"^[a-zA-Z0-9_.@-]+$")
_TX_HASH_RE = re.compile(r"^(0x)?[0-9a-fA-F]+$")


class ValidationError(Exception):
    """Raised when input validation fails."""
    kind = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


def validate_video_id(video_id: str) -> str:
    """
    Validate video ID format.

    Video IDs are alphanumeric with hyphens and underscores, which keeps them
    usable as Firestore document ids.
    """
    if not video_id or not isinstance(video_id, str):
        raise ValidationError("Video ID is required", field="video_id")

    video_id = video_id.strip()

    if not _VIDEO_ID_RE.match(video_id):
        raise ValidationError("Invalid video ID format", field="video_id")

    if len(video_id) > MAX_VIDEO_ID_LENGTH:
        raise ValidationError("Video ID too long", field="video_id")

    return video_id


def validate_user_id(user_id: str, field: str = "user_id") -> str:
    """Validate an opaque user id (Firebase uid or principal text)."""
    if not user_id or not isinstance(user_id, str):
        raise ValidationError("User ID is required", field=field)

    user_id = user_id.strip()

    if not _USER_ID_RE.match(user_id):
        raise ValidationError("Invalid user ID format", field=field)

    if len(user_id) > MAX_USER_ID_LENGTH:
        raise ValidationError("User ID too long", field=field)

    return user_id


def validate_title(title: str) -> str:
    title = sanitize_text(title or "", max_length=MAX_TITLE_LENGTH + 1)
    if not title:
        raise ValidationError("Title is required", field="title")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title exceeds maximum length of {MAX_TITLE_LENGTH}", field="title")
    return title


def validate_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """
    Normalise a tag list.

    Strips whitespace, drops empty entries and duplicates (first occurrence
    wins, original casing kept) and enforces count and length bounds.
    """
    if tags is None:
        return []

    cleaned: List[str] = []
    seen = set()
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError("Tags must be strings", field="tags")
        tag = sanitize_text(tag, max_length=MAX_TAG_LENGTH + 1)
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValidationError(f"Tag exceeds maximum length of {MAX_TAG_LENGTH}", field="tags")
        if tag.lower() in seen:
            continue
        seen.add(tag.lower())
        cleaned.append(tag)

    if len(cleaned) > MAX_TAGS:
        raise ValidationError(f"At most {MAX_TAGS} tags are allowed", field="tags")

    return cleaned


def validate_storage_ref(storage_ref: Optional[str]) -> Optional[str]:
    if storage_ref is None:
        return None
    storage_ref = storage_ref.strip()
    if not storage_ref:
        return None
    if len(storage_ref) > MAX_STORAGE_REF_LENGTH:
        raise ValidationError("Storage reference too long", field="storage_ref")
    return storage_ref


def validate_comment_text(text: str) -> str:
    text = sanitize_text(text or "", max_length=MAX_COMMENT_LENGTH + 1)
    if not text:
        raise ValidationError("Comment text is required", field="text")
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            f"Comment exceeds maximum length of {MAX_COMMENT_LENGTH}", field="text"
        )
    return text


def validate_tx_hash(tx_hash: str) -> str:
    if not tx_hash or not isinstance(tx_hash, str):
        raise ValidationError("Transaction hash is required", field="tx_hash")
    tx_hash = tx_hash.strip()
    if not _TX_HASH_RE.match(tx_hash) or len(tx_hash) > MAX_TX_HASH_LENGTH:
        raise ValidationError("Invalid transaction hash", field="tx_hash")
    return tx_hash


def validate_page(limit: Optional[int], offset: Optional[int]) -> None:
    if limit is not None and limit < 0:
        raise ValidationError("limit must be non-negative", field="limit")
    if offset is not None and offset < 0:
        raise ValidationError("offset must be non-negative", field="offset")


def sanitize_text(text: str, max_length: int = 1000) -> str:
    """
    Sanitize text input by removing potentially dangerous characters.

    Preserves most Unicode for internationalization.
    """
    if not text:
        return ""

    # Remove null bytes and control characters (except newlines/tabs)
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)

    # Truncate
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()
