"""FeedService application layer — orchestrates listing, loader and renderer."""

import asyncio
from collections.abc import Iterable

import structlog

from reddit_rss.feed.loader import BatchLoader
from reddit_rss.feed.models import Feed, FeedItem, FetchKey
from reddit_rss.feed.renderer import ItemRenderer
from reddit_rss.listing.models import ListingEntry
from reddit_rss.models import FeedFilters
from reddit_rss.ports import Clock, ContentFetcher, ListingClient

logger = structlog.get_logger(__name__)

NSFW_FLAIR = "nsfw"


def is_nsfw(entry: ListingEntry) -> bool:
    return entry.over_18 or entry.link_flair_text.lower() == NSFW_FLAIR


def select_entries(
    entries: Iterable[ListingEntry], filters: FeedFilters
) -> list[ListingEntry]:
    selected = []
    for entry in entries:
        if filters.safe and is_nsfw(entry):
            continue
        if filters.min_score is not None and entry.score < filters.min_score:
            continue
        if filters.flair is not None and entry.link_flair_text != filters.flair:
            continue
        selected.append(entry)
    return selected


class FeedService:
    def __init__(
        self,
        listing_client: ListingClient,
        content_fetcher: ContentFetcher,
        renderer: ItemRenderer,
        now: Clock,
        *,
        feed_link: str,
        feed_description: str,
        author_name: str = "",
        author_email: str = "",
        capacity: int = 10,
        fetch_timeout: float | None = None,
    ):
        self._listing_client = listing_client
        self._content_fetcher = content_fetcher
        self._renderer = renderer
        self._now = now
        self._feed_link = feed_link
        self._feed_description = feed_description
        self._author_name = author_name
        self._author_email = author_email
        self._capacity = capacity
        self._fetch_timeout = fetch_timeout

    async def _load_item(self, key: FetchKey) -> FeedItem:
        body = await self._content_fetcher.fetch(key.entry)
        return self._renderer.render(key.entry, body)

    async def assemble(
        self,
        entries: Iterable[ListingEntry],
        filters: FeedFilters,
        title: str,
        cancelled: asyncio.Event | None = None,
    ) -> Feed:
        """Build a feed from listing entries.

        Entries are filtered before any content is fetched. Entries whose
        fetch fails are left out; the rest keep their listing order.
        """
        selected = select_entries(entries, filters)
        loader: BatchLoader[FetchKey, FeedItem] = BatchLoader(
            self._load_item, capacity=self._capacity, timeout=self._fetch_timeout
        )
        results = await loader.load_many(
            [FetchKey.for_entry(entry) for entry in selected], cancelled
        )

        items = []
        for entry, result in zip(selected, results):
            if not result.ok:
                logger.debug("feed_item_dropped", id=entry.id, error=str(result.error))
                continue
            items.append(result.value)

        now = self._now()
        return Feed(
            title=title,
            link=self._feed_link,
            description=self._feed_description,
            author_name=self._author_name,
            author_email=self._author_email,
            created=now,
            updated=now,
            items=tuple(items),
        )

    async def build_feed(
        self,
        path: str,
        query: str,
        filters: FeedFilters,
        cancelled: asyncio.Event | None = None,
    ) -> Feed:
        listing = await self._listing_client.fetch_listing(path, query)
        title = f"reddit-rss {path}?{query}" if query else f"reddit-rss {path}"
        return await self.assemble(listing.entries, filters, title, cancelled)
