"""
Follow relationship graph.

Each directed edge is stored under a composite key derived from the
(follower, followed) pair. Presence of the key is the whole state; the
stored value is a one-element relationship list carrying the follow time.
Follower/following queries decode every key (no secondary index).
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import quote, unquote

from app.core.repositories.exceptions import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowError,
)
from app.core.repositories.models import FollowRelationship
from app.core.repositories.typed_map import ListMap

logger = logging.getLogger(__name__)

PAIR_SEPARATOR = ":"


def pair_key(follower: str, followed: str) -> str:
    """Encode an ordered user pair as one key; ids are escaped so the separator is unambiguous."""
    return f"{quote(follower, safe='')}{PAIR_SEPARATOR}{quote(followed, safe='')}"


def split_pair_key(key: str) -> Optional[Tuple[str, str]]:
    parts = key.split(PAIR_SEPARATOR)
    if len(parts) != 2:
        return None
    return unquote(parts[0]), unquote(parts[1])


class FollowRepository:
    def __init__(self, edges: ListMap[FollowRelationship]):
        self.edges = edges

    def follow(self, follower: str, followed: str, timestamp: int) -> FollowRelationship:
        """
        Create the edge follower -> followed.

        Raises:
            SelfFollowError: If both ids are equal
            AlreadyFollowingError: If the edge already exists
        """
        if follower == followed:
            raise SelfFollowError("You cannot follow yourself")

        relationship = FollowRelationship(
            follower_principal=follower,
            followed_principal=followed,
            timestamp=timestamp,
        )

        def insert(current: List[FollowRelationship]) -> List[FollowRelationship]:
            if current:
                raise AlreadyFollowingError("You are already following this user")
            return [relationship]

        self.edges.update(pair_key(follower, followed), insert)
        logger.debug(f"{follower} followed {followed}")
        return relationship

    def unfollow(self, follower: str, followed: str) -> None:
        """
        Raises:
            NotFollowingError: If the edge does not exist
        """
        if not self.edges.delete(pair_key(follower, followed)):
            raise NotFollowingError("You are not following this user")
        logger.debug(f"{follower} unfollowed {followed}")

    def is_following(self, follower: str, followed: str) -> bool:
        return self.edges.has(pair_key(follower, followed))

    def followers_of(self, user_id: str) -> List[str]:
        return [
            pair[0]
            for pair in (split_pair_key(key) for key in self.edges.keys())
            if pair is not None and pair[1] == user_id
        ]

    def following_of(self, user_id: str) -> List[str]:
        return [
            pair[1]
            for pair in (split_pair_key(key) for key in self.edges.keys())
            if pair is not None and pair[0] == user_id
        ]

    def relationship(self, follower: str, followed: str) -> Optional[FollowRelationship]:
        records = self.edges.get(pair_key(follower, followed))
        return records[0] if records else None
