from reddit_rss.feed.models import Feed, FeedItem, FetchError, FetchKey, FetchResult
from reddit_rss.feed.loader import BatchLoader
from reddit_rss.feed.content import HttpContentFetcher
from reddit_rss.feed.renderer import ItemRenderer
from reddit_rss.feed.serializer import render_rss
from reddit_rss.feed.service import FeedService

__all__ = [
    "Feed",
    "FeedItem",
    "FetchError",
    "FetchKey",
    "FetchResult",
    "BatchLoader",
    "HttpContentFetcher",
    "ItemRenderer",
    "render_rss",
    "FeedService",
]
