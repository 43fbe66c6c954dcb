"""Shared fixtures for unit tests."""

import pytest

from reddit_rss.listing.models import ListingEntry


def make_entry(id: str = "abc123", **overrides) -> ListingEntry:
    fields = {
        "id": id,
        "title": f"Post {id}",
        "author": "alice",
        "permalink": f"/r/python/comments/{id}/post/",
        "url": f"https://example.com/articles/{id}",
        "created_utc": 1700000000.0,
        "score": 10,
    }
    fields.update(overrides)
    return ListingEntry(**fields)


@pytest.fixture
def entry() -> ListingEntry:
    """A plain link post pointing at an external article."""
    return make_entry()


@pytest.fixture
def link_json() -> dict:
    """The data object of one t3 child, as the listing API returns it."""
    return {
        "id": "xyz789",
        "title": "A post",
        "author": "bob",
        "permalink": "/r/python/comments/xyz789/a_post/",
        "url": "https://example.com/a-post",
        "created_utc": 1700000123.0,
        "score": 42,
        "link_flair_text": "News",
        "over_18": False,
        "is_self": False,
        "selftext_html": None,
        "domain": "example.com",
    }
