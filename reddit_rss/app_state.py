from typing import NamedTuple

from reddit_rss.config import Settings
from reddit_rss.feed.service import FeedService


class AppState(NamedTuple):
    feed_service: FeedService
    settings: Settings
