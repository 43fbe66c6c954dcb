from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from reddit_rss.listing.models import ListingEntry

V = TypeVar("V")


@dataclass(frozen=True)
class FetchKey:
    """Loader key for one entry; two keys are equal iff their ids are."""

    id: str
    entry: ListingEntry = field(compare=False, repr=False)

    @classmethod
    def for_entry(cls, entry: ListingEntry) -> "FetchKey":
        return cls(id=entry.id, entry=entry)


@dataclass(frozen=True)
class FetchResult(Generic[V]):
    value: V | None = None
    error: Exception | None = None

    def __post_init__(self):
        if self.value is not None and self.error is not None:
            raise ValueError("FetchResult holds a value or an error, not both")

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FeedItem:
    id: str
    title: str
    link: str
    author: str
    created: datetime
    content: str


@dataclass(frozen=True)
class Feed:
    title: str
    link: str
    description: str
    author_name: str
    author_email: str
    created: datetime
    updated: datetime
    items: tuple[FeedItem, ...] = ()


class FetchError(Exception):
    pass


class SerializationError(Exception):
    pass
