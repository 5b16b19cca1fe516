"""Reactions — side effects triggered by observable state changes.

Unlike Computed (which is lazy and only evaluates on read), a Reaction
is an eager Observer: it re-runs whenever its tracked dependencies change,
on the next flush by default or on the spot with ``sync=True``.

Two flavors:
- autorun(fn): runs fn immediately, re-runs when any observable it read changes.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new value
  when data_fn's result changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, TypeVar

from rewatch.observer import Observer

if TYPE_CHECKING:
    from rewatch.owner import Owner

T = TypeVar("T")


class Reaction:
    """Disposable handle around an eager Observer."""

    __slots__ = ("_observer",)

    def __init__(self, observer: Observer) -> None:
        self._observer = observer

    @property
    def observer(self) -> Observer:
        return self._observer

    @property
    def disposed(self) -> bool:
        return not self._observer.active

    def dispose(self) -> None:
        """Stop this reaction. Disconnects from all dependencies."""
        self._observer.teardown()

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "active"
        return f"Reaction({self._observer.expression}, {state})"


def autorun(
    fn: Callable[[], Any], *, owner: Owner | None = None, sync: bool = False
) -> Reaction:
    """Run fn immediately, then re-run whenever any observable it reads changes.

    Returns the Reaction (call .dispose() to stop).

    Usage:
        counter = Observable(0)
        log = []

        r = autorun(lambda: log.append(counter.get()))
        # log == [0]: ran immediately

        counter.set(1)
        flush()
        # log == [0, 1]: re-ran because counter changed

        r.dispose()
        counter.set(2)
        flush()
        # log == [0, 1]: stopped
    """
    return Reaction(Observer(owner, fn, sync=sync))


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], Any],
    *,
    fire_immediately: bool = False,
    owner: Owner | None = None,
    sync: bool = False,
) -> Reaction:
    """Track data_fn's observables; call effect_fn when the result changes.

    Unlike autorun, effect_fn only fires when data_fn's *return value* changes
    (or is a mutable container), not on every dependency notification.

    Usage:
        first = Observable("Alice")
        last = Observable("Smith")

        effects = []
        r = reaction(
            lambda: f"{first.get()} {last.get()}",
            lambda name: effects.append(name),
        )
        # effects == []: data_fn ran to establish deps, effect not fired yet

        first.set("Bob")
        flush()
        # effects == ["Bob Smith"]
    """
    observer = Observer(owner, data_fn, lambda value, _old: effect_fn(value), sync=sync)
    if fire_immediately:
        observer.fire(observer.value, None)
    return Reaction(observer)
