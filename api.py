import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reddit_rss.app_state import AppState
from reddit_rss.config import Settings
from reddit_rss.feed.content import HttpContentFetcher
from reddit_rss.feed.renderer import ItemRenderer
from reddit_rss.feed.service import FeedService
from reddit_rss.listing.client import HttpListingClient
from reddit_rss.routers.feed import router as feed_router

settings = Settings()

logging.basicConfig(level=settings.log_level.upper())
logger = structlog.get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def build_feed_service(cfg: Settings) -> FeedService:
    listing_client = HttpListingClient(
        cfg.reddit_url, cfg.user_agent, timeout=cfg.listing_timeout
    )
    content_fetcher = HttpContentFetcher(
        cfg.user_agent,
        timeout=cfg.fetch_timeout,
        max_content_length=cfg.max_content_length,
        max_download_bytes=cfg.max_download_bytes,
    )
    renderer = ItemRenderer(cfg.mirror_url, cfg.internal_url)
    return FeedService(
        listing_client,
        content_fetcher,
        renderer,
        utc_now,
        feed_link=cfg.about_url,
        feed_description=cfg.feed_description,
        author_name=cfg.feed_author_name,
        author_email=cfg.feed_author_email,
        capacity=cfg.batch_capacity,
        fetch_timeout=cfg.fetch_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.app_state = AppState(
        feed_service=build_feed_service(settings),
        settings=settings,
    )
    logger.info("app_started", reddit_url=settings.reddit_url, mirror_url=settings.mirror_url)
    yield


app = FastAPI(title="reddit-rss", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(feed_router)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
