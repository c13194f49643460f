"""
Process-wide cache of remotely fetched resources, addressed by hierarchical keys.

Each distinct key owns exactly one CacheEntry. Concurrent reads of a key share
a single in-flight fetch; writes invalidate entries by key prefix. Entries never
expire on their own.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from dental_client.core.errors import ClientError

logger = logging.getLogger(__name__)

CacheKey = tuple[str | int, ...]
Fetcher = Callable[[], Awaitable[Any]]


class QueryStatus(Enum):
    """Lifecycle state of a cached resource."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


def make_key(segments: Sequence[str | int]) -> CacheKey:
    """Normalize a key given as any sequence into the tuple form used by the cache."""
    return tuple(segments)


def is_prefix(prefix: Sequence[str | int], key: CacheKey) -> bool:
    """Return True if the leading segments of ``key`` equal ``prefix`` exactly."""
    prefix = make_key(prefix)
    return len(prefix) <= len(key) and key[:len(prefix)] == prefix


@dataclass
class CacheEntry:
    """Cached state for one key. Mutated in place as fetches start and land."""

    key: CacheKey
    status: QueryStatus = QueryStatus.IDLE
    data: Any = None
    error: Exception | None = None
    fetched_at: datetime | None = None
    is_stale: bool = True

    _fetcher: Fetcher | None = field(default=None, repr=False, compare=False)
    _task: asyncio.Task | None = field(default=None, repr=False, compare=False)
    _subscribers: int = field(default=0, repr=False, compare=False)
    _generation: int = field(default=0, repr=False, compare=False)
    _task_generation: int = field(default=0, repr=False, compare=False)

    @property
    def is_fresh(self) -> bool:
        """Fresh only after a successful fetch that has not been invalidated since."""
        return self.status is QueryStatus.SUCCESS and not self.is_stale

    @property
    def is_fetching(self) -> bool:
        return self._task is not None

    @property
    def subscriber_count(self) -> int:
        return self._subscribers


class QueryCache:
    """
    Key-addressed cache with request deduplication and prefix invalidation.

    All bookkeeping happens between awaits on a single event loop, so no locking
    is needed: a state change is never observed half-applied.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_entry(self, key: Sequence[str | int]) -> CacheEntry | None:
        """Return the entry for ``key`` without triggering a fetch."""
        return self._entries.get(make_key(key))

    def keys(self) -> list[CacheKey]:
        return list(self._entries)

    def _ensure_entry(self, key: CacheKey, fetcher: Fetcher) -> CacheEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key)
            self._entries[key] = entry
        entry._fetcher = fetcher
        return entry

    def subscribe(self, key: Sequence[str | int], fetcher: Fetcher) -> CacheEntry:
        """Register a mounted reader; invalidation refetches subscribed keys in the background."""
        entry = self._ensure_entry(make_key(key), fetcher)
        entry._subscribers += 1
        return entry

    def unsubscribe(self, key: Sequence[str | int]) -> None:
        entry = self._entries.get(make_key(key))
        if entry is not None and entry._subscribers > 0:
            entry._subscribers -= 1

    async def fetch(self, key: Sequence[str | int], fetcher: Fetcher) -> CacheEntry:
        """
        Read ``key``, fetching it only if no fresh value is cached.

        If a fetch for the key is already running the caller joins it instead of
        issuing another request. A running fetch that began before the last
        invalidation is waited out and followed by a new one, so a read issued
        after an invalidation never resolves with data from before it.
        Cancelling the caller does not cancel the shared fetch. Fetch errors are
        recorded on the entry, not raised.
        """
        entry = self._ensure_entry(make_key(key), fetcher)
        if entry.is_fresh:
            return entry
        await self._fetch_current(entry)
        return entry

    async def refetch(self, key: Sequence[str | int]) -> CacheEntry:
        """Fetch ``key`` again even if the cached value is fresh (manual retry)."""
        key = make_key(key)
        entry = self._entries.get(key)
        if entry is None or entry._fetcher is None:
            raise KeyError(key)
        await self._fetch_current(entry)
        return entry

    async def _fetch_current(self, entry: CacheEntry) -> None:
        """Join or start a fetch that began at the entry's current generation."""
        while entry._task is not None and entry._task_generation != entry._generation:
            await asyncio.shield(entry._task)
        task = entry._task or self._start_fetch(entry)
        await asyncio.shield(task)

    def _start_fetch(self, entry: CacheEntry) -> asyncio.Task:
        fetcher = entry._fetcher
        if fetcher is None:
            raise RuntimeError(f"No fetcher registered for query {entry.key!r}")
        entry.status = QueryStatus.PENDING
        task = asyncio.get_running_loop().create_task(
            self._run_fetch(entry, fetcher, entry._generation),
            name=f"query-fetch:{entry.key!r}",
        )
        entry._task = task
        entry._task_generation = entry._generation
        return task

    async def _run_fetch(self, entry: CacheEntry, fetcher: Fetcher, generation: int) -> None:
        try:
            data = await fetcher()
        except ClientError as e:
            entry.status = QueryStatus.ERROR
            entry.error = e
            logger.warning(
                "query_fetch_failed",
                extra={"key": entry.key, "error": str(e)},
            )
        except Exception as e:
            entry.status = QueryStatus.ERROR
            entry.error = e
            logger.exception("query_fetch_crashed", extra={"key": entry.key})
        else:
            entry.status = QueryStatus.SUCCESS
            entry.data = data
            entry.error = None
            entry.fetched_at = datetime.now(UTC)
            # An invalidation that arrived mid-flight makes this result stale on arrival
            entry.is_stale = entry._generation != generation
        finally:
            entry._task = None

        if entry._generation != generation and entry._subscribers > 0:
            self._start_fetch(entry)

    def invalidate(self, prefix: Sequence[str | int]) -> list[CacheKey]:
        """
        Mark every entry whose key equals or starts with ``prefix`` as stale.

        Entries with subscribed readers are refetched in the background; the
        rest refetch on their next read. Returns the invalidated keys.
        """
        invalidated = [key for key in self._entries if is_prefix(prefix, key)]
        for key in invalidated:
            entry = self._entries[key]
            entry.is_stale = True
            entry._generation += 1
            if entry._subscribers > 0 and entry._task is None and entry._fetcher is not None:
                self._start_fetch(entry)
        logger.info(
            "queries_invalidated",
            extra={"prefix": make_key(prefix), "count": len(invalidated)},
        )
        return invalidated

    async def wait_for_fetches(self) -> None:
        """Wait until no fetch is in flight, including refetches started along the way."""
        while tasks := [e._task for e in self._entries.values() if e._task is not None]:
            await asyncio.gather(*tasks, return_exceptions=True)

    def reset(self) -> None:
        """Drop every entry and cancel in-flight fetches."""
        for entry in self._entries.values():
            if entry._task is not None:
                entry._task.cancel()
        self._entries.clear()
