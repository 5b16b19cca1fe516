"""Computed values — derived state with automatic dependency tracking.

A Computed wraps a lazy Observer. When a dependency changes the observer
is only marked dirty; the function re-runs on the next read. Reading a
Computed inside another evaluation makes the reader depend on everything
the Computed read, so the reader is signalled directly by those values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from rewatch._tracking import current_observer
from rewatch.observer import Observer

if TYPE_CHECKING:
    from rewatch.owner import Owner

T = TypeVar("T")


class Computed(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_observer",)

    def __init__(self, fn: Callable[[], T], *, owner: Owner | None = None) -> None:
        self._observer = Observer(owner, fn, lazy=True)

    @property
    def observer(self) -> Observer:
        return self._observer

    @property
    def dirty(self) -> bool:
        return self._observer.dirty

    def get(self) -> T:
        """Read the computed value. Recomputes if dirty."""
        observer = self._observer
        if not observer.active:
            return observer.value
        if observer.dirty:
            observer.evaluate()
        if current_observer.get() is not None:
            observer.depend()
        return observer.value

    def _path_value(self) -> T:
        return self.get()

    def _deep_children(self) -> tuple[T]:
        return (self.get(),)

    def dispose(self) -> None:
        """Disconnect from all dependencies. The last value stays readable."""
        self._observer.teardown()

    def __repr__(self) -> str:
        observer = self._observer
        state = "dirty" if observer.dirty else f"cached={observer.value!r}"
        return f"Computed({observer.expression}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a function.

    Usage:
        counter = Observable(0)

        @computed
        def doubled():
            return counter.get() * 2

        doubled.get()  # 0
        counter.set(5)
        doubled.get()  # 10
    """
    return Computed(fn)
