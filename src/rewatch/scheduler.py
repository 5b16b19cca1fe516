"""Scheduler queue — batches deferred observers into one flush per tick.

Observers signalled during a tick are queued once each, no matter how many
of their dependencies changed. The first queued observer arranges a single
flush at the next cooperative point; the flush runs everything in creation
(id) order, so parents created before children update first.

Batching: mutations inside an @action or `with transaction()` hold the
flush back until the outermost scope exits, then flush synchronously.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from rewatch._tracking import untracked
from rewatch.config import config
from rewatch.errors import CircularUpdateError, warn

if TYPE_CHECKING:
    from rewatch.observer import Observer
    from rewatch.owner import Owner

logger = logging.getLogger("rewatch.scheduler")

Defer = Callable[[Callable[[], None]], object]


class Scheduler:
    """Pending-observer queue with a deterministic, livelock-resistant flush."""

    def __init__(self) -> None:
        self.defer: Defer | None = None
        self._queue: list[Observer] = []
        self._pending: set[int] = set()
        # Scheduled during a flush behind the scan position; they go next time.
        self._deferred: list[Observer] = []
        self._activated: list[Owner] = []
        self._circular: dict[int, int] = {}
        self._halted: set[int] = set()
        self._waiting = False
        self._flushing = False
        self._index = 0
        self._batch_depth = 0

    @property
    def flushing(self) -> bool:
        return self._flushing

    @property
    def pending_count(self) -> int:
        return len(self._queue) + len(self._deferred)

    def is_pending(self, observer: Observer) -> bool:
        return observer.id in self._pending

    def schedule(self, observer: Observer) -> None:
        """Queue ``observer`` for the next flush. Duplicate calls are ignored."""
        oid = observer.id
        if oid in self._pending or oid in self._halted:
            return

        if self._flushing:
            count = self._circular[oid] = self._circular.get(oid, 0) + 1
            if count > config.max_update_count:
                self._halted.add(oid)
                warn(str(CircularUpdateError(observer)), observer.owner)
                return

        self._pending.add(oid)
        if not self._flushing:
            self._queue.append(observer)
        elif oid < self._queue[self._index].id:
            self._deferred.append(observer)
        else:
            # Keep the unprocessed tail sorted so it runs within this flush.
            i = len(self._queue) - 1
            while i > self._index and self._queue[i].id > oid:
                i -= 1
            self._queue.insert(i + 1, observer)

        if not self._waiting:
            self._waiting = True
            self._arrange()

    def queue_activated(self, owner: Owner) -> None:
        """Fire ``owner``'s activated hook after the current or next flush."""
        owner.inactive = False
        self._activated.append(owner)
        if not self._waiting:
            self._waiting = True
            self._arrange()

    def _arrange(self) -> None:
        if self._batch_depth > 0:
            return  # end_batch() flushes
        if not config.async_mode:
            self.flush()
        elif self.defer is not None:
            self.defer(self.flush)
        else:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("No event loop running; waiting for an explicit flush()")
                return
            loop.call_soon(self.flush)

    def flush(self) -> None:
        """Run every queued observer in ascending id order.

        Tracking is suspended: a flush may start inside an evaluation (the
        outermost transaction exit), and nothing read by before hooks or
        lifecycle hooks belongs to that evaluation.
        """
        if self._flushing:
            return
        with untracked():
            self._flush()

    def _flush(self) -> None:
        self._flushing = True
        processed: list[Observer] = []
        completed = False
        try:
            self._queue.sort(key=lambda o: o.id)
            self._index = 0
            while self._index < len(self._queue):
                observer = self._queue[self._index]
                if observer.before is not None:
                    observer.before()
                self._pending.discard(observer.id)
                observer.run()
                processed.append(observer)
                self._index += 1
            completed = True
        finally:
            activated = self._activated
            carry = [] if completed else self._queue[self._index + 1:]
            self._reset(carry)
            if not completed:
                self._rearm()

        self._call_activated_hooks(activated)
        self._call_updated_hooks(processed)
        self._rearm()

    def _rearm(self) -> None:
        if self._queue and not self._waiting:
            self._waiting = True
            self._arrange()

    def _reset(self, carry: list[Observer]) -> None:
        self._queue = carry + self._deferred
        self._deferred = []
        self._pending = {o.id for o in self._queue}
        self._activated = []
        self._circular.clear()
        self._halted.clear()
        self._index = 0
        self._flushing = False
        self._waiting = False

    def _call_activated_hooks(self, owners: list[Owner]) -> None:
        for owner in owners:
            owner.call_hook("activated")

    def _call_updated_hooks(self, observers: list[Observer]) -> None:
        for observer in observers:
            owner = observer.owner
            if owner is not None and owner.primary is observer and not owner.is_destroyed:
                owner.call_hook("updated")

    def begin_batch(self) -> None:
        """Enter a batching scope. Nested batches are supported."""
        self._batch_depth += 1

    def end_batch(self) -> None:
        """Exit a batching scope. The outermost exit flushes pending observers."""
        self._batch_depth -= 1
        if self._batch_depth == 0 and self._waiting and not self._flushing:
            self.flush()

    def clear(self) -> None:
        """Drop all queued work and the batching state without running anything."""
        self._reset([])
        self._batch_depth = 0

    def __repr__(self) -> str:
        state = "flushing" if self._flushing else "idle"
        return f"Scheduler({state}, pending={self.pending_count})"


scheduler = Scheduler()


def set_scheduler(defer: Defer | None) -> None:
    """Set the function that arranges deferred flushes.

    Call once from the main/UI loop:
        rewatch.set_scheduler(app.call_later)

    ``defer(callback)`` must run ``callback`` at the next cooperative point.
    Pass None to fall back to the running asyncio loop.
    """
    scheduler.defer = defer


def flush() -> None:
    """Flush the queue now. Useful outside an event loop and in tests."""
    scheduler.flush()


def get_pending_count() -> int:
    """Number of observers waiting to run. Useful for testing."""
    return scheduler.pending_count
