"""Tests for the FastAPI endpoints."""

from datetime import datetime, timezone
from unittest.mock import patch

import feedparser
import httpx
import pytest
from fastapi.testclient import TestClient

from api import app
from reddit_rss.app_state import AppState
from reddit_rss.config import Settings
from reddit_rss.feed.content import HttpContentFetcher
from reddit_rss.feed.models import Feed, FeedItem, SerializationError
from reddit_rss.feed.renderer import ItemRenderer
from reddit_rss.feed.service import FeedService
from reddit_rss.listing.client import HttpListingClient
from reddit_rss.listing.models import UpstreamListingError
from reddit_rss.routers.feed import get_app_state

NOW = datetime(2026, 2, 20, 12, 0, tzinfo=timezone.utc)


def make_feed(*ids: str) -> Feed:
    return Feed(
        title="reddit-rss /r/python",
        link="https://example.com/about",
        description="test feed",
        author_name="tester",
        author_email="",
        created=NOW,
        updated=NOW,
        items=tuple(
            FeedItem(
                id=i,
                title=f"Post {i}",
                link=f"https://example.com/{i}",
                author="alice",
                created=NOW,
                content=f"<p>{i}</p>",
            )
            for i in ids
        ),
    )


class FakeFeedService:
    def __init__(self, feed: Feed | None = None, raises: Exception | None = None):
        self._feed = feed or make_feed()
        self._raises = raises
        self.calls: list[dict] = []

    async def build_feed(self, path, query, filters, cancelled=None) -> Feed:
        self.calls.append({"path": path, "query": query, "filters": filters})
        if self._raises is not None:
            raise self._raises
        return self._feed


def make_app_state(feed_service=None) -> AppState:
    return AppState(
        feed_service=feed_service or FakeFeedService(),
        settings=Settings(),
    )


@pytest.fixture
def client():
    return TestClient(app, raise_server_exceptions=True)


@pytest.fixture(autouse=True)
def reset_overrides():
    yield
    app.dependency_overrides.clear()


class TestRootRedirect:
    def test_root_redirects_to_about_page(self, client):
        """GET / should permanently redirect to the about URL."""
        state = make_app_state()
        app.dependency_overrides[get_app_state] = lambda: state
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == state.settings.about_url


class TestFeedEndpoint:
    def test_returns_rss_xml(self, client):
        """A feed request should return 200 with an RSS document."""
        state = make_app_state(FakeFeedService(make_feed("a", "b")))
        app.dependency_overrides[get_app_state] = lambda: state
        response = client.get("/r/python.json")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        parsed = feedparser.parse(response.text)
        assert [e.id for e in parsed.entries] == ["a", "b"]

    def test_cache_control_header(self, client):
        """Responses should carry the configured Cache-Control header."""
        app.dependency_overrides[get_app_state] = lambda: make_app_state()
        response = client.get("/r/python.json")
        assert response.headers["cache-control"] == "s-maxage=1800, stale-while-revalidate=3600"

    def test_path_and_query_passed_to_service(self, client):
        """The request path and raw query string should reach the service."""
        service = FakeFeedService()
        app.dependency_overrides[get_app_state] = lambda: make_app_state(service)
        client.get("/r/python/top.json?t=week&limit=5")
        assert service.calls[0]["path"] == "/r/python/top.json"
        assert service.calls[0]["query"] == "t=week&limit=5"

    def test_filters_parsed_from_query(self, client):
        """limit, safe and flair should become the feed filters."""
        service = FakeFeedService()
        app.dependency_overrides[get_app_state] = lambda: make_app_state(service)
        client.get("/r/python.json?limit=100&safe=True&flair=News")
        filters = service.calls[0]["filters"]
        assert filters.min_score == 100
        assert filters.safe is True
        assert filters.flair == "News"

    def test_bad_limit_is_ignored(self, client):
        """An unparseable limit should not fail the request."""
        service = FakeFeedService()
        app.dependency_overrides[get_app_state] = lambda: make_app_state(service)
        response = client.get("/r/python.json?limit=abc")
        assert response.status_code == 200
        assert service.calls[0]["filters"].min_score is None

    def test_upstream_error_returns_502(self, client):
        """A failed listing fetch should fail the whole request with 502."""
        service = FakeFeedService(raises=UpstreamListingError("reddit is down"))
        app.dependency_overrides[get_app_state] = lambda: make_app_state(service)
        response = client.get("/r/python.json")
        assert response.status_code == 502
        assert "reddit is down" in response.json()["detail"]

    def test_serialization_error_returns_500(self, client):
        """A feed that cannot be rendered should fail with 500, not a partial document."""
        app.dependency_overrides[get_app_state] = lambda: make_app_state()
        with patch(
            "reddit_rss.routers.feed.render_rss",
            side_effect=SerializationError("bad feed"),
        ):
            response = client.get("/r/python.json")
        assert response.status_code == 500
        assert response.json() == {"detail": "bad feed"}

    def test_repeated_filter_parameters_use_first_value(self, client):
        """A parameter given twice is read from its first occurrence."""
        service = FakeFeedService()
        app.dependency_overrides[get_app_state] = lambda: make_app_state(service)
        client.get("/r/python.json?limit=5&limit=9&flair=News&flair=Meta")
        filters = service.calls[0]["filters"]
        assert filters.min_score == 5
        assert filters.flair == "News"

    def test_malformed_listing_returns_502(self, client):
        """A listing with a non-object child is an upstream failure, not a crash."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"kind": "Listing", "data": {"children": ["oops"]}})

        settings = Settings()
        service = FeedService(
            HttpListingClient(
                settings.reddit_url, settings.user_agent, transport=httpx.MockTransport(handler)
            ),
            HttpContentFetcher(settings.user_agent),
            ItemRenderer(settings.mirror_url),
            lambda: NOW,
            feed_link=settings.about_url,
            feed_description=settings.feed_description,
        )
        app.dependency_overrides[get_app_state] = lambda: AppState(service, settings)
        response = client.get("/r/python.json")
        assert response.status_code == 502
        assert "malformed listing child" in response.json()["detail"]
