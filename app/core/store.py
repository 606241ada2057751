"""
SocialStore: the one object that owns every collection.

Built once at process start and handed to each request. Methods take the
authenticated Caller explicitly and either return a value or raise a
RepositoryError / ValidationError. Operations that depend on the address
resolver await it before touching any collection, so a failed lookup writes
nothing.
"""

import time
from typing import Callable, List, Optional, Tuple

from app.config import FIRESTORE_COLLECTION_PREFIX, STORE_BACKEND, logger
from app.core.addresses import AddressResolver, ClaimsAddressResolver, create_address_resolver
from app.core.repositories.aggregates import CommentRepository, TipRepository, WatchRepository
from app.core.repositories.backends import InMemoryMapFactory, MapFactory, create_map_factory
from app.core.repositories.codec import (
    COMMENT_LIST_CODEC,
    FOLLOW_LIST_CODEC,
    PROFILE_CODEC,
    TIP_LIST_CODEC,
    VIDEO_CODEC,
    WATCH_LIST_CODEC,
)
from app.core.repositories.exceptions import NotFoundError
from app.core.repositories.follows import FollowRepository
from app.core.repositories.models import (
    Caller,
    Comment,
    FollowRelationship,
    TipRecord,
    UserProfile,
    VideoAnalytics,
    VideoMetadata,
    VideoPatch,
    WatchEvent,
)
from app.core.repositories.profiles import ProfileRepository
from app.core.repositories.typed_map import CounterMap, EntityMap, ListMap
from app.core.repositories.videos import VideoRepository
from app.core.search import VideoSearch
from app.core.security.constants import MAX_AVATAR_URL_LENGTH, MAX_NAME_LENGTH
from app.core.security.validation import (
    ValidationError,
    sanitize_text,
    validate_comment_text,
    validate_storage_ref,
    validate_tags,
    validate_title,
    validate_tx_hash,
    validate_user_id,
    validate_video_id,
)

# Named maps on the substrate
USER_PROFILES = "user_profiles"
VIDEOS = "videos"
WATCH_LOG = "watch_log"
TIP_RECORDS = "tip_records"
COMMENTS = "comments"
COMMENT_SEQ = "comment_seq"
FOLLOW_RELATIONSHIPS = "follow_relationships"

Clock = Callable[[], int]


def system_clock() -> int:
    """Seconds since the epoch."""
    return int(time.time())


class SocialStore:
    def __init__(
        self,
        maps: Optional[MapFactory] = None,
        clock: Clock = system_clock,
        address_resolver: Optional[AddressResolver] = None,
    ):
        maps = maps or InMemoryMapFactory()
        self.clock = clock
        self.address_resolver = address_resolver or ClaimsAddressResolver()

        self.profiles = ProfileRepository(EntityMap(maps.open(USER_PROFILES), PROFILE_CODEC))
        self.videos = VideoRepository(EntityMap(maps.open(VIDEOS), VIDEO_CODEC))
        self.comments = CommentRepository(
            ListMap(maps.open(COMMENTS), COMMENT_LIST_CODEC),
            self.videos,
            CounterMap(maps.open(COMMENT_SEQ)),
        )
        self.tips = TipRepository(ListMap(maps.open(TIP_RECORDS), TIP_LIST_CODEC), self.videos)
        self.watch = WatchRepository(ListMap(maps.open(WATCH_LOG), WATCH_LIST_CODEC), self.videos)
        self.follows = FollowRepository(ListMap(maps.open(FOLLOW_RELATIONSHIPS), FOLLOW_LIST_CODEC))
        self.search = VideoSearch(self.videos, self.watch)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    async def save_my_profile(self, caller: Caller, name: str, avatar_url: str = "") -> UserProfile:
        evm_address = await self.address_resolver.resolve(caller)
        profile = UserProfile(
            evm_address=evm_address,
            name=sanitize_text(name, max_length=MAX_NAME_LENGTH),
            avatar_url=sanitize_text(avatar_url, max_length=MAX_AVATAR_URL_LENGTH),
        )
        return self.profiles.put_profile(caller.uid, profile)

    def get_my_profile(self, caller: Caller) -> UserProfile:
        return self.profiles.get_profile_or_raise(caller.uid)

    def get_profile(self, user_id: str) -> UserProfile:
        return self.profiles.get_profile_or_raise(user_id)

    def list_profiles(self) -> List[Tuple[str, UserProfile]]:
        return self.profiles.list_profiles()

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------

    def create_video(
        self,
        caller: Caller,
        video_id: str,
        title: str,
        tags: Optional[List[str]] = None,
        storage_ref: Optional[str] = None,
    ) -> VideoMetadata:
        metadata = VideoMetadata(
            video_id=validate_video_id(video_id),
            uploader_principal=caller.uid,
            title=validate_title(title),
            tags=validate_tags(tags),
            storage_ref=validate_storage_ref(storage_ref),
            timestamp=self.clock(),
        )
        video = self.videos.create_video(metadata)
        # Only the creator that won the insert purges, and only once it has committed
        self._purge_orphans(video.video_id)
        return video

    def _purge_orphans(self, video_id: str) -> None:
        # A re-created id starts clean: drop lists left behind by an earlier delete
        purged = [repo.clear(video_id) for repo in (self.comments, self.tips, self.watch)]
        if any(purged):
            logger.info("Purged orphaned dependents of re-created video %s", video_id)

    def get_video(self, video_id: str) -> VideoMetadata:
        return self.videos.get_video_or_raise(video_id)

    def list_all_videos(self) -> List[VideoMetadata]:
        return self.videos.list_videos()

    def list_videos_by_tag(self, tag: str) -> List[VideoMetadata]:
        return self.videos.list_videos_by_tag(tag)

    def list_videos_by_uploader(self, uploader: str) -> List[VideoMetadata]:
        return self.videos.list_videos_by_owner(uploader)

    def update_video(
        self,
        caller: Caller,
        video_id: str,
        title: Optional[str] = None,
        tags: Optional[List[str]] = None,
        storage_ref: Optional[str] = None,
    ) -> VideoMetadata:
        patch = VideoPatch(
            title=validate_title(title) if title is not None else None,
            tags=validate_tags(tags) if tags is not None else None,
            storage_ref=validate_storage_ref(storage_ref),
        )
        return self.videos.update_video(video_id, caller.uid, patch)

    def delete_video(self, caller: Caller, video_id: str) -> None:
        self.videos.delete_video(video_id, caller.uid)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def post_comment(self, caller: Caller, video_id: str, text: str) -> Comment:
        return self.comments.post(video_id, caller.uid, validate_comment_text(text), self.clock())

    def get_comments(self, video_id: str) -> List[Comment]:
        return self.comments.list_for(video_id)

    def get_my_comments(self, caller: Caller) -> List[Comment]:
        return self.comments.by_commenter(caller.uid)

    def delete_comment(
        self,
        caller: Caller,
        video_id: str,
        timestamp: int,
        seq: Optional[int] = None,
    ) -> Comment:
        return self.comments.delete(video_id, timestamp, caller.uid, seq=seq)

    # ------------------------------------------------------------------
    # Tips
    # ------------------------------------------------------------------

    async def record_tip(self, caller: Caller, video_id: str, amount: int, tx_hash: str) -> TipRecord:
        """
        Record a tip from the caller to the video's uploader.

        The recipient address comes from the uploader's profile as it is now;
        it is not re-resolved later. Both lookups finish before the append.

        Raises:
            NotFoundError: If the video or the uploader's profile is missing
            UpstreamError: If the caller's address cannot be resolved
        """
        if amount < 0:
            raise ValidationError("amount must be non-negative", field="amount")
        tx_hash = validate_tx_hash(tx_hash)

        video = self.videos.get_video_or_raise(video_id)
        owner_profile = self.profiles.get_profile(video.uploader_principal)
        if owner_profile is None:
            raise NotFoundError("Video uploader has no profile with EVM address")

        from_addr = await self.address_resolver.resolve(caller)

        tip = TipRecord(
            from_addr=from_addr,
            to_addr=owner_profile.evm_address,
            video_id=video_id,
            amount=amount,
            tx_hash=tx_hash,
            timestamp=self.clock(),
        )
        return self.tips.append(video_id, tip)

    def get_tips_for_video(self, video_id: str) -> List[TipRecord]:
        return self.tips.list_for(video_id)

    async def get_my_sent_tips(self, caller: Caller) -> List[TipRecord]:
        return self.tips.sent_by(await self.address_resolver.resolve(caller))

    async def get_my_received_tips(self, caller: Caller) -> List[TipRecord]:
        return self.tips.received_by(await self.address_resolver.resolve(caller))

    # ------------------------------------------------------------------
    # Watch events
    # ------------------------------------------------------------------

    def log_watch_event(
        self,
        caller: Caller,
        video_id: str,
        watch_duration_sec: int,
        liked: bool = False,
        completed: bool = False,
    ) -> WatchEvent:
        if watch_duration_sec < 0:
            raise ValidationError("watch_duration_sec must be non-negative", field="watch_duration_sec")
        event = WatchEvent(
            user_principal=caller.uid,
            video_id=video_id,
            watch_duration_sec=watch_duration_sec,
            liked=liked,
            completed=completed,
            timestamp=self.clock(),
        )
        return self.watch.append(video_id, event)

    def get_watch_events(self, video_id: str) -> List[WatchEvent]:
        return self.watch.list_for(video_id)

    def get_my_watch_events(self, caller: Caller) -> List[WatchEvent]:
        return self.watch.by_viewer(caller.uid)

    def get_video_analytics(self, video_id: str) -> VideoAnalytics:
        return self.search.video_analytics(video_id)

    # ------------------------------------------------------------------
    # Follows
    # ------------------------------------------------------------------

    def follow_user(self, caller: Caller, user_id: str) -> FollowRelationship:
        return self.follows.follow(caller.uid, validate_user_id(user_id), self.clock())

    def unfollow_user(self, caller: Caller, user_id: str) -> None:
        self.follows.unfollow(caller.uid, user_id)

    def is_following(self, follower: str, followed: str) -> bool:
        return self.follows.is_following(follower, followed)

    def get_followers(self, user_id: str) -> List[str]:
        return self.follows.followers_of(user_id)

    def get_following(self, user_id: str) -> List[str]:
        return self.follows.following_of(user_id)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def search_videos(self, query: str, limit: Optional[int] = None, offset: Optional[int] = None) -> List[VideoMetadata]:
        return self.search.search_by_text(query, limit, offset)

    def search_videos_by_tags(
        self,
        tags: List[str],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[VideoMetadata]:
        return self.search.search_by_tags(tags, limit, offset)

    def list_recent_videos(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[VideoMetadata]:
        return self.search.list_recent(limit, offset)


def create_store() -> SocialStore:
    """Build the process-wide store from configuration."""

    logger.info("Opening %s store backend", STORE_BACKEND)
    return SocialStore(
        maps=create_map_factory(STORE_BACKEND, prefix=FIRESTORE_COLLECTION_PREFIX),
        address_resolver=create_address_resolver(),
    )
