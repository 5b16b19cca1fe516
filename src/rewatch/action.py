"""Batching scopes over the scheduler queue.

While any scope is open the scheduler arranges no flush: writes only mark
observers pending. Leaving the outermost scope flushes the queue right
there, before control returns to the caller, so each pending observer runs
once against the final state. Scopes nest by depth counting. Sync and lazy
observers are not queued and behave the same inside a scope.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from rewatch.scheduler import scheduler

P = ParamSpec("P")
R = TypeVar("R")


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Run fn inside a transaction.

    The queue is flushed synchronously when fn returns or raises, unless
    an enclosing scope is still open.

    Usage:
        counter_a = Observable(0)
        counter_b = Observable(0)

        @action
        def swap():
            a, b = counter_a.get(), counter_b.get()
            counter_a.set(b)
            counter_b.set(a)
            # one flush after return sees both values swapped
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with transaction():
            return fn(*args, **kwargs)

    return wrapper


@contextmanager
def transaction() -> Iterator[None]:
    """Hold back flushes for the duration of the block.

    Exiting the outermost block runs every observer queued inside it.

    Usage:
        with transaction():
            counter_a.set(1)
            counter_b.set(2)
        # pending observers have run by this line
    """
    scheduler.begin_batch()
    try:
        yield
    finally:
        scheduler.end_batch()
