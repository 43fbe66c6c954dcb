from reddit_rss.listing.models import Listing, ListingEntry, UpstreamListingError
from reddit_rss.listing.client import HttpListingClient

__all__ = ["Listing", "ListingEntry", "UpstreamListingError", "HttpListingClient"]
