"""
Aggregation repositories: ordered lists of dependent records per video.

Every list lives under its parent video id and is rewritten whole on each
mutation. Appends require the parent video to exist at write time; reads
never fail on a missing parent and return an empty list instead.
"""

import logging
from typing import Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from app.core.repositories.exceptions import NotFoundError
from app.core.repositories.models import Comment, TipRecord, WatchEvent
from app.core.repositories.typed_map import CounterMap, ListMap
from app.core.repositories.videos import VideoRepository

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


class AggregateRepository(Generic[R]):
    """Generic list-per-parent collection."""

    def __init__(self, lists: ListMap[R], videos: VideoRepository):
        self.lists = lists
        self.videos = videos

    @property
    def record_name(self) -> str:
        return self.lists.codec.item.name

    def append(self, parent: str, record: R) -> R:
        return self.append_with(parent, lambda _: record)

    def append_with(self, parent: str, build: Callable[[List[R]], R]) -> R:
        """
        Append the record produced by ``build(current_list)``.

        Building inside the atomic update lets a record depend on the list it
        joins (e.g. a sequence number).

        Raises:
            NotFoundError: If no video exists under ``parent``
            SizeLimitExceededError: If the record or the grown list is over its
                bound; the stored list is left unchanged
        """
        if not self.videos.exists(parent):
            raise NotFoundError(f"Video {parent} not found")

        appended: List[R] = []

        def grow(current: List[R]) -> List[R]:
            record = build(current)
            self.lists.codec.item.check(record)
            appended.append(record)
            return current + [record]

        self.lists.update(parent, grow)
        logger.debug(f"Appended {self.record_name} to {parent}")
        return appended[-1]

    def list_for(self, parent: str) -> List[R]:
        return self.lists.get(parent)

    def list_by_predicate(self, predicate: Callable[[R], bool]) -> List[R]:
        """Linear scan across every parent's list, flattened in key order."""
        return [
            record
            for _, records in self.lists.items()
            for record in records
            if predicate(record)
        ]

    def remove_one(self, parent: str, match: Callable[[R], bool]) -> R:
        """
        Remove the first record satisfying ``match``.

        Raises:
            NotFoundError: If nothing under ``parent`` matches
        """
        removed: List[R] = []

        def shrink(current: List[R]) -> List[R]:
            for index, record in enumerate(current):
                if match(record):
                    removed.append(record)
                    return current[:index] + current[index + 1:]
            raise NotFoundError(
                f"{self.record_name} not found or you don't have permission to delete it"
            )

        self.lists.update(parent, shrink)
        logger.debug(f"Removed {self.record_name} from {parent}")
        return removed[-1]

    def clear(self, parent: str) -> bool:
        return self.lists.delete(parent)


class CommentRepository(AggregateRepository[Comment]):
    """
    Comments carry a per-video ``seq`` drawn from a counter that outlives the
    list, so a number is never handed out twice for the same video id, even
    after the comment holding it (or the whole list) is deleted.
    """

    def __init__(self, lists: ListMap[Comment], videos: VideoRepository, counters: CounterMap):
        super().__init__(lists, videos)
        self.counters = counters

    def post(self, video_id: str, commenter: str, text: str, timestamp: int) -> Comment:
        def build(current: List[Comment]) -> Comment:
            # Floor covers lists written before the counter existed
            seq = self.counters.advance(video_id, floor=current[-1].seq if current else 0)
            return Comment(
                commenter_principal=commenter,
                video_id=video_id,
                text=text,
                timestamp=timestamp,
                seq=seq,
            )

        return self.append_with(video_id, build)

    def by_commenter(self, commenter: str) -> List[Comment]:
        return self.list_by_predicate(lambda c: c.commenter_principal == commenter)

    def delete(
        self,
        video_id: str,
        timestamp: int,
        commenter: str,
        seq: Optional[int] = None,
    ) -> Comment:
        """
        Delete the caller's first comment at ``timestamp``.

        A comment by someone else is reported exactly like a missing one.
        ``seq`` narrows the match when the same author commented twice in one
        second.
        """
        def match(comment: Comment) -> bool:
            return (
                comment.timestamp == timestamp
                and comment.commenter_principal == commenter
                and (seq is None or comment.seq == seq)
            )

        return self.remove_one(video_id, match)


class TipRepository(AggregateRepository[TipRecord]):
    def sent_by(self, address: str) -> List[TipRecord]:
        return self.list_by_predicate(lambda t: t.from_addr == address)

    def received_by(self, address: str) -> List[TipRecord]:
        return self.list_by_predicate(lambda t: t.to_addr == address)


class WatchRepository(AggregateRepository[WatchEvent]):
    def by_viewer(self, user_id: str) -> List[WatchEvent]:
        return self.list_by_predicate(lambda e: e.user_principal == user_id)
