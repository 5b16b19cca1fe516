"""Active-observer context — who is evaluating right now.

Uses contextvars to track which Observer is running its getter, so that
every Subject read during the evaluation can register itself as a
dependency without being passed the Observer explicitly.

Each ``tracking()`` scope pushes on entry and restores the outer Observer
on every exit path, so a Computed read from inside a render restores the
render as current afterwards.
"""

from __future__ import annotations

import contextvars
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from rewatch.observer import Observer

# The currently-evaluating observer. When set, any Subject.depend() call
# registers the Subject as a dependency of it.
current_observer: contextvars.ContextVar[Observer | None] = contextvars.ContextVar(
    "current_observer", default=None
)


@contextmanager
def tracking(observer: Observer | None) -> Iterator[None]:
    """Make ``observer`` current for the duration of the block."""
    token = current_observer.set(observer)
    try:
        yield
    finally:
        current_observer.reset(token)


def untracked() -> AbstractContextManager[None]:
    """Suspend dependency collection (used around hooks and callbacks)."""
    return tracking(None)
