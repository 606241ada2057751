"""
Pydantic models for request/response validation.

Stored records (VideoMetadata, Comment, ...) are returned as-is; this module
only holds request bodies and the envelope types the API adds around them.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.repositories.models import UserProfile
from app.core.security.constants import (
    MAX_AVATAR_URL_LENGTH,
    MAX_COMMENT_LENGTH,
    MAX_NAME_LENGTH,
    MAX_STORAGE_REF_LENGTH,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
    MAX_TX_HASH_LENGTH,
)


class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="forbid",
    )


# -----------------------------------------------------------------------------
# Profiles
# -----------------------------------------------------------------------------

class SaveProfileRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    avatar_url: str = Field(default="", max_length=MAX_AVATAR_URL_LENGTH)


class ProfileEntry(BaseModel):
    user_id: str
    profile: UserProfile


# -----------------------------------------------------------------------------
# Videos
# -----------------------------------------------------------------------------

class CreateVideoRequest(BaseSchema):
    video_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS * 2)
    storage_ref: Optional[str] = Field(default=None, max_length=MAX_STORAGE_REF_LENGTH)


class UpdateVideoRequest(BaseSchema):
    """Only the fields present are changed."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    tags: Optional[List[str]] = Field(default=None, max_length=MAX_TAGS * 2)
    storage_ref: Optional[str] = Field(default=None, max_length=MAX_STORAGE_REF_LENGTH)


# -----------------------------------------------------------------------------
# Social records
# -----------------------------------------------------------------------------

class PostCommentRequest(BaseSchema):
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)


class RecordTipRequest(BaseSchema):
    amount: int = Field(..., ge=0)
    tx_hash: str = Field(..., min_length=1, max_length=MAX_TX_HASH_LENGTH)


class LogWatchRequest(BaseSchema):
    watch_duration_sec: int = Field(..., ge=0)
    liked: bool = False
    completed: bool = False


class FollowStatusResponse(BaseModel):
    follower: str
    followed: str
    following: bool


# -----------------------------------------------------------------------------
# Misc
# -----------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    detail: str
    error: str


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    backend: str
