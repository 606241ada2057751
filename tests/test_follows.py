"""
Tests for the follow graph.

Run with: pytest tests/test_follows.py -v
"""

import pytest

from app.core.repositories.exceptions import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowError,
)
from app.core.repositories.follows import pair_key, split_pair_key
from app.core.repositories.models import Caller
from app.core.security.validation import ValidationError
from app.core.store import FOLLOW_RELATIONSHIPS


class TestPairKey:
    def test_round_trip(self):
        assert split_pair_key(pair_key("alice", "bob")) == ("alice", "bob")

    def test_separator_in_ids_is_unambiguous(self):
        assert pair_key("a:b", "c") != pair_key("a", "b:c")
        assert split_pair_key(pair_key("a:b", "c")) == ("a:b", "c")

    def test_malformed_key(self):
        assert split_pair_key("no-separator") is None


class TestFollow:
    def test_follow_unfollow_cycle(self, store, alice, bob):
        store.follow_user(alice, "bob")
        with pytest.raises(AlreadyFollowingError):
            store.follow_user(alice, "bob")
        store.unfollow_user(alice, "bob")
        with pytest.raises(NotFollowingError):
            store.unfollow_user(alice, "bob")

        assert store.get_followers("bob") == []

    def test_duplicate_follow_keeps_one_edge(self, store, maps, alice):
        store.follow_user(alice, "bob")
        with pytest.raises(AlreadyFollowingError):
            store.follow_user(alice, "bob")
        assert len(maps.open(FOLLOW_RELATIONSHIPS)) == 1

    def test_self_follow(self, store, alice):
        with pytest.raises(SelfFollowError):
            store.follow_user(alice, "alice")
        assert store.get_following("alice") == []

    def test_invalid_target(self, store, alice):
        with pytest.raises(ValidationError):
            store.follow_user(alice, "bad id")

    def test_relationship_records_time(self, store, alice, clock):
        relationship = store.follow_user(alice, "bob")
        assert relationship.timestamp == clock.now
        assert store.follows.relationship("alice", "bob") == relationship
        assert store.follows.relationship("bob", "alice") is None


class TestQueries:
    def test_direction_matters(self, store, alice, bob):
        store.follow_user(alice, "bob")

        assert store.is_following("alice", "bob")
        assert not store.is_following("bob", "alice")
        assert store.get_followers("bob") == ["alice"]
        assert store.get_following("alice") == ["bob"]
        assert store.get_followers("alice") == []

    def test_fan_in_and_out(self, store, alice, bob):
        carol = Caller(uid="carol")
        store.follow_user(alice, "dave")
        store.follow_user(bob, "dave")
        store.follow_user(carol, "dave")
        store.follow_user(alice, "bob")

        assert sorted(store.get_followers("dave")) == ["alice", "bob", "carol"]
        assert sorted(store.get_following("alice")) == ["bob", "dave"]

    def test_ids_with_separator(self, store):
        store.follows.follow("user:1", "user:2", timestamp=1)

        assert store.get_followers("user:2") == ["user:1"]
        assert store.get_following("user:1") == ["user:2"]
        assert store.get_followers("1") == []
