"""
Video metadata repository.

Owns the single-valued video map. Mutations are owner-restricted and run as
one atomic read-modify-write on the video's key.
"""

import logging
from typing import List, Optional

from app.core.repositories.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.repositories.models import VideoMetadata, VideoPatch
from app.core.repositories.typed_map import EntityMap

logger = logging.getLogger(__name__)


class VideoRepository:
    """
    Repository for video metadata.

    Reads return decoded snapshots, so callers may mutate what they get back
    without affecting stored state. Listing carries no ordering guarantee
    beyond the substrate's key order; use the search engine for sorted views.
    """

    def __init__(self, videos: EntityMap[VideoMetadata]):
        self.videos = videos

    def create_video(self, metadata: VideoMetadata) -> VideoMetadata:
        """
        Insert a new video.

        Args:
            metadata: Fully populated VideoMetadata

        Returns:
            The stored metadata

        Raises:
            AlreadyExistsError: If the video id is occupied
            SizeLimitExceededError: If the encoded row is over its bound
        """
        self.videos.codec.check(metadata)

        def insert(current: Optional[VideoMetadata]) -> VideoMetadata:
            if current is not None:
                raise AlreadyExistsError(f"Video ID {metadata.video_id} already exists")
            return metadata

        self.videos.update(metadata.video_id, insert)
        logger.debug(f"Created video metadata: {metadata.video_id}")
        return metadata

    def get_video(self, video_id: str) -> Optional[VideoMetadata]:
        return self.videos.get(video_id)

    def get_video_or_raise(self, video_id: str) -> VideoMetadata:
        """
        Get video metadata or raise NotFoundError.

        Raises:
            NotFoundError: If video not found
        """
        video = self.get_video(video_id)
        if video is None:
            raise NotFoundError(f"Video {video_id} not found")
        return video

    def exists(self, video_id: str) -> bool:
        return self.videos.contains(video_id)

    def list_videos(self) -> List[VideoMetadata]:
        return self.videos.values()

    def list_videos_by_tag(self, tag: str) -> List[VideoMetadata]:
        """Videos carrying ``tag`` exactly (case-sensitive)."""
        return [video for video in self.videos.values() if tag in video.tags]

    def list_videos_by_owner(self, owner: str) -> List[VideoMetadata]:
        return [video for video in self.videos.values() if video.uploader_principal == owner]

    def update_video(self, video_id: str, caller: str, patch: VideoPatch) -> VideoMetadata:
        """
        Apply the fields present in ``patch``.

        Args:
            video_id: Video ID
            caller: User id of the requester; must be the uploader
            patch: Partial update

        Returns:
            Updated VideoMetadata

        Raises:
            NotFoundError: If video not found
            PermissionDeniedError: If caller is not the uploader
        """
        def apply(current: Optional[VideoMetadata]) -> VideoMetadata:
            if current is None:
                raise NotFoundError(f"Video {video_id} not found")
            if current.uploader_principal != caller:
                raise PermissionDeniedError("Only the uploader can update video metadata")

            changes = {}
            if patch.title is not None:
                changes["title"] = patch.title
            if patch.tags is not None:
                changes["tags"] = list(patch.tags)
            if patch.storage_ref is not None:
                changes["storage_ref"] = patch.storage_ref
            return current.model_copy(update=changes)

        updated = self.videos.update(video_id, apply)
        logger.debug(f"Updated video {video_id}")
        assert updated is not None
        return updated

    def delete_video(self, video_id: str, caller: str) -> None:
        """
        Delete the metadata row only. Dependent lists are left in place.

        Raises:
            NotFoundError: If video not found
            PermissionDeniedError: If caller is not the uploader
        """
        def remove(current: Optional[VideoMetadata]) -> None:
            if current is None:
                raise NotFoundError(f"Video {video_id} not found")
            if current.uploader_principal != caller:
                raise PermissionDeniedError("Only the uploader can delete the video")
            return None

        self.videos.update(video_id, remove)
        logger.debug(f"Deleted video metadata: {video_id}")
