"""
Repository layer for the social store.

Typed repositories over named persistent maps: profiles and videos (one row
per key), comment/tip/watch lists per video, and the follow graph.
"""

from app.core.repositories.aggregates import (
    AggregateRepository,
    CommentRepository,
    TipRepository,
    WatchRepository,
)
from app.core.repositories.backends import (
    FirestoreMap,
    InMemoryMap,
    KeyValueMap,
    MapFactory,
    create_map_factory,
)
from app.core.repositories.exceptions import (
    AlreadyExistsError,
    AlreadyFollowingError,
    NotFollowingError,
    NotFoundError,
    PermissionDeniedError,
    RepositoryError,
    SelfFollowError,
    SizeLimitExceededError,
    StoreBackendError,
    UpstreamError,
)
from app.core.repositories.follows import FollowRepository
from app.core.repositories.profiles import ProfileRepository
from app.core.repositories.videos import VideoRepository

__all__ = [
    "AggregateRepository",
    "CommentRepository",
    "TipRepository",
    "WatchRepository",
    "FirestoreMap",
    "InMemoryMap",
    "KeyValueMap",
    "MapFactory",
    "create_map_factory",
    "AlreadyExistsError",
    "AlreadyFollowingError",
    "NotFollowingError",
    "NotFoundError",
    "PermissionDeniedError",
    "RepositoryError",
    "SelfFollowError",
    "SizeLimitExceededError",
    "StoreBackendError",
    "UpstreamError",
    "FollowRepository",
    "ProfileRepository",
    "VideoRepository",
]
