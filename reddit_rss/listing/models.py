"""Listing domain models — upstream posts as immutable values."""

import html
from dataclasses import dataclass, field
from typing import Any

LINK_KIND = "t3"


@dataclass(frozen=True)
class ListingEntry:
    """One post from an upstream subreddit listing."""

    id: str
    title: str
    author: str
    permalink: str
    url: str
    created_utc: float
    score: int = 0
    link_flair_text: str = ""
    over_18: bool = False
    body_html: str = ""
    is_self: bool = False
    selftext_html: str = ""
    domain: str = ""
    gallery: tuple[str, ...] = ()
    video_url: str | None = None
    crosspost_parent: "ListingEntry | None" = field(default=None, repr=False)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ListingEntry":
        """Build an entry from the ``data`` object of a ``t3`` listing child.

        Missing or null fields fall back to empty values, the way the
        upstream API omits them for deleted or partially hidden posts.
        Media fields that are not shaped as expected are ignored rather than
        failing the whole entry.

        Args:
            data: The decoded JSON object describing one link.

        Returns:
            A frozen ListingEntry.

        Raises:
            KeyError: If the post has no ``id``.
            AttributeError: If ``data`` is not a JSON object.
        """
        parents = data.get("crosspost_parent_list")
        parent = None
        if isinstance(parents, list) and parents and isinstance(parents[0], dict):
            parent = cls.from_json(parents[0])

        return cls(
            id=data["id"],
            title=data.get("title") or "",
            author=data.get("author") or "",
            permalink=data.get("permalink") or "",
            url=data.get("url") or "",
            created_utc=float(data.get("created_utc") or 0),
            score=int(data.get("score") or 0),
            link_flair_text=data.get("link_flair_text") or "",
            over_18=bool(data.get("over_18")),
            body_html=data.get("body_html") or "",
            is_self=bool(data.get("is_self")),
            selftext_html=data.get("selftext_html") or "",
            domain=data.get("domain") or "",
            gallery=_gallery_urls(data),
            video_url=_video_url(data),
            crosspost_parent=parent,
        )


def _object(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _gallery_urls(data: dict[str, Any]) -> tuple[str, ...]:
    # gallery_data carries the order, media_metadata carries the sources
    items = _object(data.get("gallery_data")).get("items")
    metadata = _object(data.get("media_metadata"))

    urls = []
    for item in items if isinstance(items, list) else []:
        media = _object(metadata.get(_object(item).get("media_id")))
        source = _object(media.get("s"))
        url = source.get("u") or source.get("gif") or source.get("mp4")
        if isinstance(url, str) and url:
            urls.append(html.unescape(url))
    return tuple(urls)


def _video_url(data: dict[str, Any]) -> str | None:
    media = _object(data.get("secure_media")) or _object(data.get("media"))
    video = _object(media.get("reddit_video"))
    url = video.get("fallback_url")
    return url if isinstance(url, str) and url else None


@dataclass
class Listing:
    entries: list[ListingEntry]
    after: str | None = None


class UpstreamListingError(Exception):
    pass
