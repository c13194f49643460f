"""Reader and writer handles composed against the shared QueryCache."""
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Self, TypeVar

from dental_client.core.errors import ClientError
from dental_client.core.query_cache import (
    CacheEntry,
    CacheKey,
    Fetcher,
    QueryCache,
    QueryStatus,
    make_key,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")
R = TypeVar("R")


@dataclass(frozen=True)
class QueryState:
    """Snapshot of what a reader sees for its key."""

    status: QueryStatus
    data: Any = None
    error: Exception | None = None
    fetched_at: datetime | None = None
    is_stale: bool = False

    @classmethod
    def idle(cls) -> "QueryState":
        return cls(status=QueryStatus.IDLE)

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "QueryState":
        return cls(
            status=entry.status,
            data=entry.data,
            error=entry.error,
            fetched_at=entry.fetched_at,
            is_stale=entry.is_stale,
        )

    @property
    def is_idle(self) -> bool:
        return self.status is QueryStatus.IDLE

    @property
    def is_pending(self) -> bool:
        return self.status is QueryStatus.PENDING

    @property
    def is_success(self) -> bool:
        return self.status is QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is QueryStatus.ERROR


class Query:
    """
    A reader bound to one cache key.

    Use as an async context manager to mark the reader as mounted: while mounted,
    invalidating its key refetches in the background. A disabled query never
    touches the network and reports ``idle``.
    """

    def __init__(
        self,
        cache: QueryCache,
        key: Sequence[str | int],
        fetcher: Fetcher,
        enabled: bool = True,
    ) -> None:
        self._cache = cache
        self._key = make_key(key)
        self._fetcher = fetcher
        self._enabled = enabled
        self._mounted = False
        self._subscribed = False

    @property
    def key(self) -> CacheKey:
        return self._key

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> QueryState:
        """Current state from the shared cache, or ``idle`` when disabled or never read."""
        if not self._enabled:
            return QueryState.idle()
        entry = self._cache.get_entry(self._key)
        if entry is None:
            return QueryState.idle()
        return QueryState.from_entry(entry)

    async def __aenter__(self) -> Self:
        self._mounted = True
        self._sync_subscription()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    def _sync_subscription(self) -> None:
        should_subscribe = self._mounted and self._enabled
        if should_subscribe and not self._subscribed:
            self._cache.subscribe(self._key, self._fetcher)
            self._subscribed = True
        elif not should_subscribe and self._subscribed:
            self._cache.unsubscribe(self._key)
            self._subscribed = False

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable the reader; a newly enabled reader still needs ``load()``."""
        self._enabled = enabled
        self._sync_subscription()

    async def load(self) -> QueryState:
        """Return cached data, fetching it first if nothing fresh is cached."""
        if not self._enabled:
            return QueryState.idle()
        await self._cache.fetch(self._key, self._fetcher)
        return self.state

    async def refetch(self) -> QueryState:
        """Fetch again regardless of freshness; used to retry after an error."""
        if not self._enabled:
            return QueryState.idle()
        if self._key not in self._cache:
            return await self.load()
        await self._cache.refetch(self._key)
        return self.state

    def close(self) -> None:
        """Unmount the reader. An in-flight fetch still completes for other readers."""
        self._mounted = False
        self._sync_subscription()


class Mutation(Generic[V, R]):
    """
    A write operation that invalidates dependent cache keys on success.

    Every ``run`` issues its own request; concurrent runs are not merged.
    Failures are raised to the caller and leave the cache untouched.
    """

    def __init__(
        self,
        cache: QueryCache,
        mutate_fn: Callable[[V], Awaitable[R]],
        invalidates: Callable[[V], list[CacheKey]],
    ) -> None:
        self._cache = cache
        self._mutate_fn = mutate_fn
        self._invalidates = invalidates
        self.status = QueryStatus.IDLE
        self.data: R | None = None
        self.error: ClientError | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is QueryStatus.PENDING

    async def run(self, variables: V) -> R:
        self.status = QueryStatus.PENDING
        try:
            result = await self._mutate_fn(variables)
        except ClientError as e:
            self.status = QueryStatus.ERROR
            self.error = e
            logger.warning("mutation_failed", extra={"error": str(e)})
            raise

        self.status = QueryStatus.SUCCESS
        self.data = result
        self.error = None
        for key in self._invalidates(variables):
            self._cache.invalidate(key)
        return result

    def reset(self) -> None:
        self.status = QueryStatus.IDLE
        self.data = None
        self.error = None
