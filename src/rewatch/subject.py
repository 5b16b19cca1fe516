"""Subjects — the subscriber registry behind every reactive value.

A Subject does not know what it guards. The reactive value calls
``depend()`` on read and ``notify()`` on write; the Subject keeps the
insertion-ordered set of Observers currently reading it.

All graph state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING

from rewatch import _anchor
from rewatch._tracking import current_observer

if TYPE_CHECKING:
    from rewatch.observer import Observer


class Subject:
    """Subscription registry for one reactive value."""

    __slots__ = ("_id", "__weakref__")

    def __init__(self) -> None:
        self._id = _anchor.new_subject_id()
        _anchor.subjects[self._id] = self
        _anchor.subscribers[self._id] = {}
        weakref.finalize(self, _anchor.subscribers.pop, self._id, None)

    @property
    def id(self) -> int:
        return self._id

    @property
    def subscribers(self) -> list[Observer]:
        """Observers currently depending on this subject, in subscription order."""
        return [_anchor.observers[oid] for oid in _anchor.subscribers[self._id]]

    def add_sub(self, observer: Observer) -> None:
        _anchor.subscribers[self._id][observer.id] = None

    def remove_sub(self, observer: Observer) -> None:
        _anchor.subscribers[self._id].pop(observer.id, None)

    def depend(self) -> None:
        """Register this subject with the currently-evaluating observer, if any."""
        observer = current_observer.get()
        if observer is not None:
            observer.add_dep(self)

    def notify(self) -> None:
        """Signal every subscriber. Subscriptions changed mid-pass take effect next time."""
        for oid in list(_anchor.subscribers[self._id]):
            observer = _anchor.observers.get(oid)
            if observer is not None:
                observer.update()

    def __repr__(self) -> str:
        return f"Subject(id={self._id}, subscribers={len(_anchor.subscribers[self._id])})"
