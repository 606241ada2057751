"""
Pydantic models for the social store records.

Field names follow the public wire contract of the video platform API.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StoreModel(BaseModel):
    """Base for stored records; snapshots handed out are independent copies."""
    model_config = ConfigDict(extra="forbid")


class Caller(BaseModel):
    """Authenticated principal issuing a request."""

    uid: str = Field(..., min_length=1)
    email: Optional[str] = None
    # External-chain address asserted by the identity provider, if any
    address: Optional[str] = None


class UserProfile(StoreModel):
    """User profile model, keyed by user id."""

    evm_address: str = Field(..., max_length=100)
    name: str = Field(..., max_length=100)
    avatar_url: str = Field(default="", max_length=300)


class VideoMetadata(StoreModel):
    """Video metadata model, keyed by video id."""

    video_id: str = Field(..., min_length=1, max_length=100)
    uploader_principal: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    title: str
    storage_ref: Optional[str] = None
    timestamp: int = Field(..., ge=0)


class VideoPatch(StoreModel):
    """Partial update; only fields that are not None are applied."""

    title: Optional[str] = None
    tags: Optional[List[str]] = None
    storage_ref: Optional[str] = None


class Comment(StoreModel):
    commenter_principal: str = Field(..., min_length=1)
    video_id: str = Field(..., min_length=1)
    text: str
    timestamp: int = Field(..., ge=0)
    # Position in the per-video sequence; disambiguates same-second comments
    seq: int = Field(default=0, ge=0)


class TipRecord(StoreModel):
    from_addr: str
    to_addr: str
    video_id: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0)
    tx_hash: str
    timestamp: int = Field(..., ge=0)


class WatchEvent(StoreModel):
    user_principal: str = Field(..., min_length=1)
    video_id: str = Field(..., min_length=1)
    watch_duration_sec: int = Field(..., ge=0)
    liked: bool = False
    completed: bool = False
    timestamp: int = Field(..., ge=0)


class FollowRelationship(StoreModel):
    follower_principal: str = Field(..., min_length=1)
    followed_principal: str = Field(..., min_length=1)
    timestamp: int = Field(..., ge=0)


class VideoAnalytics(BaseModel):
    """Read-side aggregate over a video's watch events."""

    total_views: int = 0
    total_unique_viewers: int = 0
    total_likes: int = 0
    total_completions: int = 0
    avg_watch_duration: int = 0
