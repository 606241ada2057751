"""
Video discovery: text/tag search, recency listing, pagination and analytics.

All queries are linear scans over the video map. Results are ordered newest
first with a stable sort, so equal timestamps keep the substrate's key order
and repeated calls on the same data return the same relative order.
"""

from typing import Iterable, List, Optional, TypeVar

from app.core.repositories.aggregates import WatchRepository
from app.core.repositories.models import VideoAnalytics, VideoMetadata
from app.core.repositories.videos import VideoRepository
from app.core.security.validation import validate_page

T = TypeVar("T")


def paginate(results: List[T], limit: Optional[int] = None, offset: Optional[int] = None) -> List[T]:
    """
    Skip ``offset`` leading results and return at most ``limit`` of the rest.

    An offset past the end yields an empty list.
    """
    validate_page(limit, offset)
    start = offset or 0
    if start >= len(results):
        return []
    end = len(results) if limit is None else start + limit
    return results[start:end]


def newest_first(videos: Iterable[VideoMetadata]) -> List[VideoMetadata]:
    return sorted(videos, key=lambda video: video.timestamp, reverse=True)


class VideoSearch:
    def __init__(self, videos: VideoRepository, watch: WatchRepository):
        self.videos = videos
        self.watch = watch

    def list_recent(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[VideoMetadata]:
        return paginate(newest_first(self.videos.list_videos()), limit, offset)

    def search_by_text(
        self,
        query: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[VideoMetadata]:
        """Case-insensitive substring match against the title or any tag."""
        if not query:
            return self.list_recent(limit, offset)

        needle = query.lower()
        matches = [
            video
            for video in self.videos.list_videos()
            if needle in video.title.lower()
            or any(needle in tag.lower() for tag in video.tags)
        ]
        return paginate(newest_first(matches), limit, offset)

    def search_by_tags(
        self,
        tags: List[str],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[VideoMetadata]:
        """Videos carrying every requested tag (case-insensitive exact match)."""
        if not tags:
            return self.list_recent(limit, offset)

        wanted = [tag.lower() for tag in tags]
        matches = []
        for video in self.videos.list_videos():
            have = {tag.lower() for tag in video.tags}
            if all(tag in have for tag in wanted):
                matches.append(video)
        return paginate(newest_first(matches), limit, offset)

    def video_analytics(self, video_id: str) -> VideoAnalytics:
        """
        Aggregate a video's watch events.

        Raises:
            NotFoundError: If the video does not exist
        """
        self.videos.get_video_or_raise(video_id)
        events = self.watch.list_for(video_id)

        total_views = len(events)
        if not total_views:
            return VideoAnalytics()

        return VideoAnalytics(
            total_views=total_views,
            total_unique_viewers=len({event.user_principal for event in events}),
            total_likes=sum(1 for event in events if event.liked),
            total_completions=sum(1 for event in events if event.completed),
            avg_watch_duration=sum(event.watch_duration_sec for event in events) // total_views,
        )
