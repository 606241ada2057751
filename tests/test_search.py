"""
Tests for discovery: search, recency and pagination.

Run with: pytest tests/test_search.py -v
"""

import pytest

from app.core.search import paginate
from app.core.security.validation import ValidationError


@pytest.fixture
def five_videos(store, alice, clock):
    for index in range(5):
        clock.set(1000 + index)
        store.create_video(alice, f"v{index}", f"Video {index}")


def ids(videos):
    return [video.video_id for video in videos]


class TestPaginate:
    def test_window(self):
        assert paginate([1, 2, 3, 4, 5], limit=2, offset=1) == [2, 3]

    def test_defaults(self):
        assert paginate([1, 2, 3]) == [1, 2, 3]

    def test_zero_limit(self):
        assert paginate([1, 2, 3], limit=0) == []

    @pytest.mark.parametrize("limit,offset", [(-1, None), (None, -1)])
    def test_negative(self, limit, offset):
        with pytest.raises(ValidationError):
            paginate([1], limit=limit, offset=offset)


class TestTextSearch:
    def test_case_insensitive_title_and_tags(self, store, alice, clock):
        store.create_video(alice, "v1", "Cat jumps", tags=["funny", "cat"])
        clock.advance()
        store.create_video(alice, "v2", "Dog runs", tags=["Catalog"])
        clock.advance()
        store.create_video(alice, "v3", "Bird sings", tags=["music"])

        assert ids(store.search_videos("CAT")) == ["v2", "v1"]
        assert ids(store.search_videos("sing")) == ["v3"]
        assert store.search_videos("zebra") == []

    def test_tag_and_semantics(self, store, alice):
        store.create_video(alice, "v1", "Cat jumps", tags=["funny", "cat"])

        assert ids(store.search_videos("CAT")) == ["v1"]
        assert store.search_videos_by_tags(["funny", "dog"]) == []
        assert ids(store.search_videos_by_tags(["funny"])) == ["v1"]
        assert ids(store.search_videos_by_tags(["FUNNY", "Cat"])) == ["v1"]

    def test_tag_search_is_exact(self, store, alice):
        store.create_video(alice, "v1", "Cat", tags=["cats"])
        assert store.search_videos_by_tags(["cat"]) == []


class TestOrdering:
    def test_newest_first(self, store, five_videos):
        assert ids(store.list_recent_videos()) == ["v4", "v3", "v2", "v1", "v0"]
        assert ids(store.search_videos("")) == ids(store.list_recent_videos())
        assert ids(store.search_videos_by_tags([])) == ids(store.list_recent_videos())

    def test_equal_timestamps_are_stable(self, store, alice):
        for video_id in ("b", "c", "a"):
            store.create_video(alice, video_id, "Same second")

        first = ids(store.list_recent_videos())
        assert sorted(first) == ["a", "b", "c"]
        assert ids(store.list_recent_videos()) == first
        assert ids(store.search_videos("")) == first
        assert ids(store.search_videos("same")) == first


class TestPagination:
    def test_last_page(self, store, five_videos):
        assert ids(store.list_recent_videos(limit=2, offset=4)) == ["v0"]

    def test_offset_past_end(self, store, five_videos):
        assert store.list_recent_videos(offset=10) == []
        assert store.search_videos("video", limit=3, offset=10) == []

    def test_pages_cover_results(self, store, five_videos):
        pages = [ids(store.search_videos("video", limit=2, offset=offset)) for offset in (0, 2, 4)]
        assert pages == [["v4", "v3"], ["v2", "v1"], ["v0"]]

    def test_negative_offset(self, store, five_videos):
        with pytest.raises(ValidationError):
            store.list_recent_videos(offset=-1)
