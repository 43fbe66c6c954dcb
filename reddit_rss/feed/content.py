"""Article content fetcher — derives readable body HTML for a listing entry."""

import asyncio
import html
from urllib.parse import urlparse

import httpx
import structlog
import trafilatura

from reddit_rss.feed.models import FetchError
from reddit_rss.listing.models import ListingEntry

logger = structlog.get_logger(__name__)

IMAGE_HOSTS = {"i.redd.it", "i.imgur.com", "preview.redd.it"}
IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")
DEFAULT_MAX_DOWNLOAD_BYTES = 2 * 1024 * 1024


def is_image_url(url: str) -> bool:
    parsed = urlparse(url)
    if parsed.netloc.lower() in IMAGE_HOSTS:
        return True
    return parsed.path.lower().endswith(IMAGE_SUFFIXES)


def image_html(url: str) -> str:
    return f'<img src="{html.escape(url, quote=True)}" />'


def video_html(url: str) -> str:
    src = html.escape(url, quote=True)
    return f'<video controls src="{src}"><a href="{src}">video</a></video>'


class HttpContentFetcher:
    """Fetch the body of a post without touching the network when possible.

    Self posts, galleries, hosted videos and direct images are rendered from
    the entry itself. Anything else is downloaded and run through trafilatura.
    """

    def __init__(
        self,
        user_agent: str,
        timeout: float = 15.0,
        max_content_length: int = 50000,
        max_download_bytes: int = DEFAULT_MAX_DOWNLOAD_BYTES,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._user_agent = user_agent
        self._timeout = timeout
        self._max_content_length = max_content_length
        self._max_download_bytes = max_download_bytes
        self._transport = transport

    async def fetch(self, entry: ListingEntry) -> str | None:
        """Return body HTML for ``entry``, or None when there is nothing to show.

        Raises:
            FetchError: If the article download or extraction fails.
        """
        if entry.crosspost_parent is not None:
            return await self.fetch(entry.crosspost_parent)

        if entry.is_self:
            return html.unescape(entry.selftext_html) or None

        if entry.gallery:
            return "".join(image_html(url) for url in entry.gallery)

        if entry.video_url:
            return video_html(entry.video_url)

        if is_image_url(entry.url):
            return image_html(entry.url)

        return await self._fetch_article(entry.url)

    async def _download(self, url: str) -> str | None:
        """Stream an article page, reading at most ``max_download_bytes``.

        Returns None without reading the body when the response is not HTML.
        """
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": self._user_agent},
        ) as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()

                content_type = response.headers.get("Content-Type", "")
                if "html" not in content_type:
                    logger.debug("article_not_html", url=url, content_type=content_type)
                    return None

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) >= self._max_download_bytes:
                        logger.debug("article_truncated", url=url, limit=self._max_download_bytes)
                        break

                encoding = response.encoding or "utf-8"
                return bytes(body[: self._max_download_bytes]).decode(encoding, errors="replace")

    async def _fetch_article(self, url: str) -> str | None:
        if not url.startswith(("http://", "https://")):
            return None

        try:
            page = await self._download(url)
        except httpx.HTTPError as exc:
            raise FetchError(f"failed to download {url}: {exc}") from exc

        if page is None:
            return None

        try:
            text = await asyncio.to_thread(
                trafilatura.extract,
                page,
                url=url,
                output_format="html",
                include_images=True,
                include_links=True,
            )
        except Exception as exc:
            raise FetchError(f"failed to extract article from {url}: {exc}") from exc

        if text is None:
            logger.debug("extract_url_returns_none", url=url)
            return None

        return text[: self._max_content_length]
