"""Subreddit listing client using httpx."""

import httpx
import structlog

from reddit_rss.listing.models import LINK_KIND, Listing, ListingEntry, UpstreamListingError

logger = structlog.get_logger(__name__)


class HttpListingClient:
    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport

    def _listing_url(self, path: str, query: str) -> str:
        url = f"{self._base_url}{path}"
        return f"{url}?{query}" if query else url

    def _parse(self, payload) -> Listing:
        if not isinstance(payload, dict) or payload.get("kind") != "Listing":
            raise UpstreamListingError("upstream response is not a listing")

        data = payload.get("data")
        children = data.get("children") if isinstance(data, dict) else None
        if not isinstance(children, list):
            raise UpstreamListingError("listing has no children array")

        entries = []
        for child in children:
            if not isinstance(child, dict):
                raise UpstreamListingError(f"malformed listing child: {child!r:.80}")
            if child.get("kind") != LINK_KIND:
                continue
            try:
                entries.append(ListingEntry.from_json(child["data"]))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise UpstreamListingError(f"malformed listing entry: {exc}") from exc

        after = data.get("after")
        return Listing(entries=entries, after=after if isinstance(after, str) else None)

    async def fetch_listing(self, path: str, query: str = "") -> Listing:
        url = self._listing_url(path, query)
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("listing_fetch_failed", url=url, error=str(exc))
            raise UpstreamListingError(f"failed to fetch listing {url}: {exc}") from exc
        except ValueError as exc:
            logger.warning("listing_decode_failed", url=url, error=str(exc))
            raise UpstreamListingError(f"listing at {url} is not valid JSON") from exc

        listing = self._parse(payload)
        logger.debug("listing_fetched", url=url, count=len(listing.entries))
        return listing
