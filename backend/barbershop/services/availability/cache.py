# backend/barbershop/services/availability/cache.py
"""
In-process cache for month availability results.

Key: MonthKey(barber_id, service_id, year, month)

- Entries expire after ttl_seconds, and when the calendar day changes
  (past/lead-time classification depends on "today").
- Concurrent misses for the same key are coalesced: the first caller
  computes, the others wait for its result.
- A computation that fails or is cancelled never populates the cache.
  Waiters of a cancelled computation retry; one of them becomes the
  new leader.
- An invalidation that happens while a computation is in flight keeps
  that computation's result out of the cache, and out of the shared
  tier written through on_store.
"""

import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import date
from typing import Callable

from .cancellation import CancellationToken, check_token
from .domain import MonthAvailability, MonthKey
from .errors import ComputationCancelled

logger = logging.getLogger(__name__)

_WAIT_POLL_SECONDS = 0.05


@dataclass(frozen=True)
class _Entry:
    result: MonthAvailability
    stored_at: float
    stored_on: date


class AvailabilityCache:
    """Thread-safe key → MonthAvailability map with request coalescing."""

    def __init__(
        self,
        ttl_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._today = today
        self._lock = threading.Lock()
        self._entries: dict[MonthKey, _Entry] = {}
        self._inflight: dict[MonthKey, Future] = {}
        self._generation = 0

    # ── Read / write ─────────────────────────────────────────────────────

    def get(self, key: MonthKey) -> MonthAvailability | None:
        """Cached result, or None on miss/expiry."""
        with self._lock:
            return self._get_locked(key)

    def put(self, key: MonthKey, result: MonthAvailability) -> None:
        with self._lock:
            self._entries[key] = _Entry(result, self._clock(), self._today())

    def invalidate(self, predicate: Callable[[MonthKey], bool] | None = None) -> int:
        """
        Drop entries matching predicate (all entries when None).

        Returns:
            Number of removed entries
        """
        with self._lock:
            self._generation += 1
            if predicate is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                keys = [key for key in self._entries if predicate(key)]
                for key in keys:
                    del self._entries[key]
                removed = len(keys)
        if removed:
            logger.info(f"Availability cache invalidated: {removed} entries")
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: MonthKey) -> bool:
        return self.get(key) is not None

    # ── Coalesced compute ────────────────────────────────────────────────

    def get_or_compute(
        self,
        key: MonthKey,
        compute: Callable[[], MonthAvailability],
        token: CancellationToken | None = None,
        on_store: Callable[[MonthAvailability], None] | None = None,
    ) -> tuple[MonthAvailability, bool]:
        """
        Return (result, hit).

        hit is True when the result came from the cache or from another
        caller's in-flight computation, False when this caller computed it.

        on_store runs together with the in-process store, under the same
        lock and only when no invalidation happened during the compute.
        """
        while True:
            check_token(token)
            with self._lock:
                cached = self._get_locked(key)
                if cached is not None:
                    return cached, True
                future = self._inflight.get(key)
                leader = future is None
                if leader:
                    future = Future()
                    self._inflight[key] = future
                    generation = self._generation

            if leader:
                return self._lead(key, future, generation, compute, on_store), False

            try:
                return self._wait(future, token), True
            except ComputationCancelled:
                if token is not None and token.cancelled:
                    raise
                # The leader was superseded, not us: try again
                logger.debug(f"Leader for {key} was cancelled, retrying")

    def _lead(
        self,
        key: MonthKey,
        future: Future,
        generation: int,
        compute,
        on_store=None,
    ) -> MonthAvailability:
        try:
            result = compute()
        except BaseException as e:
            with self._lock:
                self._inflight.pop(key, None)
            future.set_exception(e)
            raise

        try:
            with self._lock:
                self._inflight.pop(key, None)
                if generation == self._generation:
                    self._entries[key] = _Entry(result, self._clock(), self._today())
                    if on_store is not None:
                        on_store(result)
                else:
                    logger.debug(f"Skipping cache store for {key}: invalidated during compute")
        finally:
            future.set_result(result)
        return result

    def _wait(self, future: Future, token: CancellationToken | None) -> MonthAvailability:
        while True:
            try:
                return future.result(timeout=_WAIT_POLL_SECONDS)
            except FutureTimeoutError:
                check_token(token)

    def _get_locked(self, key: MonthKey) -> MonthAvailability | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expired = (
            self._clock() - entry.stored_at >= self.ttl_seconds
            or entry.stored_on != self._today()
        )
        if expired:
            del self._entries[key]
            return None
        return entry.result


def matches(
    barber_id: int | None = None,
    service_id: int | None = None,
) -> Callable[[MonthKey], bool] | None:
    """Build an invalidate() predicate. No arguments → None (match everything)."""
    if barber_id is None and service_id is None:
        return None

    def predicate(key: MonthKey) -> bool:
        if barber_id is not None and key.barber_id != barber_id:
            return False
        if service_id is not None and key.service_id != service_id:
            return False
        return True

    return predicate
