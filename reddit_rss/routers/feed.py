import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse, Response

from reddit_rss.app_state import AppState
from reddit_rss.feed.models import SerializationError
from reddit_rss.feed.serializer import render_rss
from reddit_rss.listing.models import UpstreamListingError
from reddit_rss.models import FeedFilters

router = APIRouter()

logger = structlog.get_logger(__name__)

DISCONNECT_POLL_INTERVAL = 0.5


def get_app_state(request: Request) -> AppState:
    return request.app.state.app_state


@asynccontextmanager
async def disconnect_event(request: Request):
    """Yield an event that is set once the client goes away."""
    event = asyncio.Event()

    async def watch():
        while not await request.is_disconnected():
            await asyncio.sleep(DISCONNECT_POLL_INTERVAL)
        event.set()

    watcher = asyncio.create_task(watch())
    try:
        yield event
    finally:
        watcher.cancel()


@router.get("/")
async def about(state: AppState = Depends(get_app_state)):
    return RedirectResponse(state.settings.about_url, status_code=301)


@router.get("/{path:path}")
async def get_feed(
    path: str,
    request: Request,
    state: AppState = Depends(get_app_state),
):
    query = request.url.query
    logger.info("feed_requested", path=f"/{path}", query=query)
    filters = FeedFilters.from_query(request.query_params)

    try:
        async with disconnect_event(request) as cancelled:
            feed = await state.feed_service.build_feed(
                f"/{path}", query, filters, cancelled
            )
    except UpstreamListingError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    try:
        rss = render_rss(feed)
    except SerializationError as exc:
        logger.error("feed_render_failed", path=f"/{path}", error=str(exc))
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return Response(
        content=rss,
        media_type="text/xml",
        headers={"Cache-Control": state.settings.cache_control},
    )
