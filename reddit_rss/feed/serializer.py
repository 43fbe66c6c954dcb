"""RSS 2.0 rendering of an assembled feed via feedgen."""

import re

from feedgen.feed import FeedGenerator

from reddit_rss.feed.models import Feed, SerializationError

GENERATOR = "reddit-rss"

# code points outside the XML 1.0 Char production
_XML_INVALID = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def xml_safe(text: str) -> str:
    """Drop characters that XML documents cannot carry, such as NULL or \\x0b."""
    return _XML_INVALID.sub("", text) if text else ""


def _generator_for(feed: Feed) -> FeedGenerator:
    fg = FeedGenerator()
    fg.load_extension("dc")
    fg.title(xml_safe(feed.title))
    fg.link(href=xml_safe(feed.link), rel="alternate")
    fg.description(xml_safe(feed.description))
    if feed.author_email:
        fg.author({"name": xml_safe(feed.author_name), "email": xml_safe(feed.author_email)})
    if feed.author_name:
        fg.dc.dc_creator(xml_safe(feed.author_name))
    fg.generator(GENERATOR)
    fg.pubDate(feed.created)
    fg.lastBuildDate(feed.updated)

    for item in feed.items:
        # feedgen prepends by default
        fe = fg.add_entry(order="append")
        fe.guid(xml_safe(item.id), permalink=False)
        fe.title(xml_safe(item.title))
        fe.link(href=xml_safe(item.link))
        if item.author:
            fe.dc.dc_creator(xml_safe(item.author))
        fe.content(xml_safe(item.content), type="CDATA")
        fe.pubDate(item.created)
    return fg


def render_rss(feed: Feed) -> str:
    """Serialize ``feed`` to an RSS document.

    Raises:
        SerializationError: If feedgen rejects the feed.
    """
    try:
        return _generator_for(feed).rss_str(pretty=True).decode("utf-8")
    except Exception as exc:
        raise SerializationError(f"failed to render feed {feed.title!r}: {exc}") from exc
