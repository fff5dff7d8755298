"""
Optimistic sync engine.

Every mutation follows the same protocol against one cache key:

1. snapshot the current view, which already includes the speculative edits of
   earlier in-flight mutations on that key;
2. write the speculative post-mutation view to the cache;
3. dispatch the remote call;
4. on success reconcile the view with the response and refetch once the key is
   idle; on failure restore the snapshot exactly, invalidate every mutation
   on the key that started after this one and refetch once the key is idle.

An invalidated mutation never writes into the cache. When it settles it
refetches authoritative state (once the key is idle) and raises
``MutationInvalidatedError``.

The remote call and its settlement run in a task of their own, so a caller
that stops waiting does not stop the rollback or reconciliation.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from contact_directory.client.cache import CacheKey, QueryCache
from contact_directory.client.errors import MutationInvalidatedError
from contact_directory.core.logging import get_logger

logger = get_logger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
Dispatch = Callable[[], Awaitable[Any]]
Apply = Callable[[Any], Any]
Reconcile = Callable[[Any, Any], Any]

_MISSING = object()


@dataclass(eq=False)
class _Mutation:
    key: CacheKey
    name: str
    snapshot: Any
    invalidated: bool = False


class OptimisticSyncEngine:
    """Owns the query cache and runs every mutation through the optimistic protocol."""

    def __init__(self, cache: Optional[QueryCache] = None):
        self.cache = cache if cache is not None else QueryCache()
        self._fetchers: Dict[CacheKey, Fetcher] = {}
        self._in_flight: Dict[CacheKey, List[_Mutation]] = defaultdict(list)
        self._started: Dict[CacheKey, int] = defaultdict(int)
        self._stale: Set[CacheKey] = set()
        self._tasks: Set[asyncio.Task] = set()

    def register_fetcher(self, key: CacheKey, fetch: Fetcher) -> None:
        """Register the coroutine that loads authoritative state for ``key``."""
        self._fetchers[key] = fetch

    def get(self, key: CacheKey, default: Any = None) -> Any:
        return self.cache.get(key, default)

    def in_flight(self, key: CacheKey) -> int:
        return len(self._in_flight.get(key, ()))

    def is_stale(self, key: CacheKey) -> bool:
        """True when the last refresh of ``key`` after a mutation failed."""
        return key in self._stale

    async def load(self, key: CacheKey) -> Any:
        """Return the cached view, fetching it first if the key was never loaded."""
        if not self.cache.has(key):
            await self.refetch(key)
        return self.get(key)

    async def refetch(self, key: CacheKey) -> Any:
        """
        Replace the cached view of ``key`` with server state.

        The result is discarded if a mutation on the key started while the
        fetch was running, since the response may predate its speculative
        edit. Fetch errors propagate.
        """
        fetch = self._fetchers.get(key)
        if fetch is None:
            return self.get(key)

        generation = self._started[key]
        value = await fetch()
        if self._started[key] != generation or self._in_flight.get(key):
            logger.debug("Discarding fetch overtaken by a mutation", extra={"key": repr(key)})
            return self.get(key)

        self.cache.set(key, value)
        self._stale.discard(key)
        return self.get(key)

    async def mutate(
        self,
        key: CacheKey,
        apply: Apply,
        dispatch: Dispatch,
        reconcile: Optional[Reconcile] = None,
        name: str = "mutation",
    ) -> Any:
        """
        Apply ``apply`` speculatively to the view of ``key`` and dispatch.

        Args:
            key: Cache key of the affected collection
            apply: Returns the intended view given a copy of the current one
            dispatch: Performs the remote mutation
            reconcile: Folds the server response into the current view
            name: Label used in logs

        Returns:
            The dispatch response

        Raises:
            Whatever ``dispatch`` raised, after the snapshot was restored, or
            MutationInvalidatedError if an earlier mutation on the key rolled back.
        """
        snapshot = self.cache.get(key) if self.cache.has(key) else _MISSING
        speculative = apply(self.cache.get(key))

        mutation = _Mutation(key=key, name=name, snapshot=snapshot)
        self.cache.set(key, speculative)
        self._in_flight[key].append(mutation)
        self._started[key] += 1

        task = asyncio.ensure_future(self._settle(mutation, dispatch, reconcile))
        self._tasks.add(task)
        task.add_done_callback(self._forget)
        return await asyncio.shield(task)

    async def wait_idle(self) -> None:
        """Wait for every dispatched mutation to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _settle(self, mutation: _Mutation, dispatch: Dispatch, reconcile: Optional[Reconcile]) -> Any:
        key = mutation.key
        try:
            response = await dispatch()
        except (Exception, asyncio.CancelledError) as exc:
            if mutation.invalidated:
                self._finish(mutation)
                await self.refresh(key)
                raise self._invalidated(mutation) from exc
            self._rollback(mutation, exc)
            # The snapshot may predate the reconcile of an earlier mutation
            await self.refresh(key)
            raise

        self._finish(mutation)
        if mutation.invalidated:
            await self.refresh(key)
            raise self._invalidated(mutation)

        if reconcile is not None:
            self.cache.set(key, reconcile(self.cache.get(key), response))
        await self.refresh(key)
        return response

    def _rollback(self, mutation: _Mutation, exc: BaseException) -> None:
        pending = self._in_flight[mutation.key]
        later = pending[pending.index(mutation) + 1:]
        for other in later:
            other.invalidated = True
        self._finish(mutation)

        if mutation.snapshot is _MISSING:
            self.cache.remove(mutation.key)
        else:
            self.cache.set(mutation.key, mutation.snapshot)

        logger.warning(
            f"Optimistic {mutation.name} rolled back: {exc!r}",
            extra={"key": repr(mutation.key), "invalidated": len(later)},
        )

    def _finish(self, mutation: _Mutation) -> None:
        pending = self._in_flight[mutation.key]
        pending.remove(mutation)
        if not pending:
            del self._in_flight[mutation.key]

    def _invalidated(self, mutation: _Mutation) -> MutationInvalidatedError:
        logger.warning(
            f"Optimistic {mutation.name} invalidated by an earlier rollback",
            extra={"key": repr(mutation.key)},
        )
        return MutationInvalidatedError(
            f"{mutation.name} was based on a view that has been rolled back",
            details={"key": list(mutation.key)},
        )

    async def refresh(self, key: CacheKey) -> None:
        """
        Refetch ``key`` unless a mutation on it is still in flight.

        A failed fetch marks the key stale and is logged rather than raised,
        since the mutation that triggered it has already settled.
        """
        if key in self._in_flight or key not in self._fetchers:
            return
        try:
            await self.refetch(key)
        except Exception as exc:
            self._stale.add(key)
            logger.warning(f"Refresh after mutation failed: {exc!r}", extra={"key": repr(key)})

    def _forget(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled():
            # Mark the outcome retrieved; an abandoning caller already saw or dropped it
            task.exception()
