from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from reddit_rss.listing.models import Listing, ListingEntry

Clock = Callable[[], datetime]


class ListingClient(Protocol):
    async def fetch_listing(self, path: str, query: str = "") -> Listing: ...


class ContentFetcher(Protocol):
    async def fetch(self, entry: ListingEntry) -> str | None: ...
