"""Batched loader that fans fetches out over asyncio tasks and joins them."""

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Sequence
from typing import Generic, TypeVar

import structlog

from reddit_rss.feed.models import FetchError, FetchResult

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = structlog.get_logger(__name__)


class BatchLoader(Generic[K, V]):
    """Load many keys at once, fetching each unique key exactly once.

    Unique keys are coalesced into batches of at most ``capacity``. Every key
    in a batch runs on its own task and the batch waits for all of them before
    the next one starts, so at most ``capacity`` fetches are in flight. A
    failing fetch only fails its own key.
    """

    def __init__(
        self,
        fetch: Callable[[K], Awaitable[V]],
        capacity: int = 10,
        timeout: float | None = None,
    ):
        if capacity < 1:
            raise ValueError(f"batch capacity must be at least 1, got {capacity}")
        self._fetch = fetch
        self._capacity = capacity
        self._timeout = timeout

    async def load_many(
        self,
        keys: Sequence[K],
        cancelled: asyncio.Event | None = None,
    ) -> list[FetchResult[V]]:
        """Resolve every key and return results in the order of ``keys``.

        Args:
            keys: Keys to load; duplicates share one fetch and one result.
            cancelled: Optional request-scoped event. Once set, in-flight
                fetches are abandoned and unresolved keys get an error result.

        Returns:
            One FetchResult per input key, position for position.
        """
        unique = list(dict.fromkeys(keys))
        results: dict[K, FetchResult[V]] = {}
        lock = asyncio.Lock()

        for start in range(0, len(unique), self._capacity):
            if cancelled is not None and cancelled.is_set():
                break
            batch = unique[start : start + self._capacity]
            await self._dispatch(batch, results, lock, cancelled)

        for key in unique:
            if key not in results:
                results[key] = FetchResult(error=FetchError(f"load of {key!r} cancelled"))

        return [results[key] for key in keys]

    async def _call(self, key: K) -> V:
        if self._timeout is None:
            return await self._fetch(key)
        try:
            return await asyncio.wait_for(self._fetch(key), self._timeout)
        except asyncio.TimeoutError as exc:
            raise FetchError(f"fetch of {key!r} timed out after {self._timeout}s") from exc

    @staticmethod
    async def _join_or_abandon(
        tasks: list[asyncio.Task], cancelled: asyncio.Event
    ) -> None:
        joined = asyncio.gather(*tasks)
        stop = asyncio.ensure_future(cancelled.wait())
        try:
            await asyncio.wait({joined, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()
            if not joined.done():
                joined.cancel()

        # let cancelled workers unwind before the batch returns
        await asyncio.wait(tasks)

    async def _dispatch(
        self,
        batch: list[K],
        results: dict[K, FetchResult[V]],
        lock: asyncio.Lock,
        cancelled: asyncio.Event | None,
    ) -> None:
        async def worker(key: K) -> None:
            try:
                result = FetchResult(value=await self._call(key))
            except FetchError as exc:
                result = FetchResult(error=exc)
            except Exception as exc:
                error = FetchError(f"fetch of {key!r} failed: {exc}")
                error.__cause__ = exc
                result = FetchResult(error=error)

            if not result.ok:
                logger.debug("batch_fetch_failed", key=repr(key), error=str(result.error))

            async with lock:
                results.setdefault(key, result)

        tasks = [asyncio.create_task(worker(key)) for key in batch]
        if cancelled is None:
            await asyncio.gather(*tasks)
        else:
            await self._join_or_abandon(tasks, cancelled)

        logger.debug(
            "batch_joined",
            size=len(batch),
            resolved=sum(1 for key in batch if key in results),
        )
