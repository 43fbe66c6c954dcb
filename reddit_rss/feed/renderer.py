"""Turns a listing entry and its fetched body into a feed item."""

import html
from datetime import datetime, timezone

from reddit_rss.feed.models import FeedItem
from reddit_rss.listing.models import ListingEntry

DEFAULT_INTERNAL_URL = "https://old.reddit.com"


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


class ItemRenderer:
    def __init__(self, mirror_url: str, internal_url: str = DEFAULT_INTERNAL_URL):
        self._mirror_url = mirror_url.rstrip("/")
        self._internal_url = internal_url.rstrip("/")

    def item_link(self, entry: ListingEntry) -> str:
        """Point links into the listing site at the mirror instead."""
        if entry.url.startswith(self._internal_url):
            return self._mirror_url + entry.url[len(self._internal_url) :]
        return entry.url

    def comments_link(self, entry: ListingEntry) -> str:
        return self._mirror_url + entry.permalink

    def render(self, entry: ListingEntry, body: str | None) -> FeedItem:
        link = self.item_link(entry)
        comments = self.comments_link(entry)
        author = entry.author

        parts = []
        if body:
            parts.append(body)
        parts.append(
            f'<p>submitted by <a href="{_attr(f"{self._mirror_url}/user/{author}")}">'
            f"/u/{html.escape(author)}</a><br>"
        )
        if not entry.body_html and link != comments:
            parts.append(f'<span><a href="{_attr(link)}">[link]</a></span>   ')
        parts.append(f'<span><a href="{_attr(comments)}">[comments]</a></span>')
        parts.append("</p>")

        return FeedItem(
            id=entry.id,
            title=entry.title,
            link=link,
            author=author,
            created=datetime.fromtimestamp(entry.created_utc, tz=timezone.utc),
            content="".join(parts),
        )
