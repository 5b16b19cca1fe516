"""Observers — tracked computations and the heart of rewatch.

An Observer evaluates a getter while it is the current observer, so every
Subject the getter reads subscribes it. Each evaluation re-collects the
dependency set from scratch and prunes the Subjects no longer read, which
keeps the graph exact when branches read different values from run to run.

When a dependency changes the Observer is signalled through ``update()``,
and what happens next depends on its fixed evaluation policy:

- ``Policy.LAZY`` marks it dirty; the value is recomputed on the next read.
- ``Policy.SYNC`` re-runs it before ``update()`` returns.
- ``Policy.DEFERRED`` queues it on the scheduler for the next flush.

Graph edges live in _anchor keyed by id; an Observer refers to its
Subjects by id only.
"""

from __future__ import annotations

import datetime
import enum
import numbers
from typing import TYPE_CHECKING, Any, Callable, NamedTuple

from rewatch import _anchor
from rewatch._tracking import tracking, untracked
from rewatch.errors import ErrorSink, PathResolutionError, default_sink, warn
from rewatch.path import parse_path
from rewatch.scheduler import scheduler
from rewatch.traverse import traverse

if TYPE_CHECKING:
    from rewatch.owner import Owner
    from rewatch.subject import Subject

Getter = Callable[[], Any]
Callback = Callable[[Any, Any], Any]

# Immutable values: equality alone decides whether they changed.
_SCALARS = (
    str,
    bytes,
    numbers.Number,
    type(None),
    enum.Enum,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    frozenset,
)


class Policy(enum.Enum):
    """When an Observer re-evaluates after a dependency changes."""

    SYNC = "sync"
    DEFERRED = "deferred"
    LAZY = "lazy"


class Outcome(NamedTuple):
    """Result of invoking user code: a value, or the error it raised."""

    value: Any = None
    error: Exception | None = None


def _noop() -> None:
    return None


def is_composite(value: Any) -> bool:
    """Values whose contents can change without the reference changing."""
    return not isinstance(value, _SCALARS) and not callable(value)


class Observer:
    """A tracked computation with its own dependency set.

    Args:
        owner: Context that created the observer. Holds the registry it joins
            and receives its errors unless ``sink`` is given. May be None.
        expression: A zero-argument function, or a dotted path resolved
            against ``owner``.
        callback: Called as ``callback(new_value, old_value)`` on change.
        deep: Track every nested field of the value.
        user: Report getter/callback errors to the sink instead of raising.
        lazy: Defer evaluation until read (computed semantics).
        sync: Re-run synchronously instead of through the scheduler.
        before: Called right before each batched run.
        primary: Mark as the owner's primary (render) observer.
        sink: Explicit error sink.
    """

    __slots__ = (
        "_id",
        "owner",
        "expression",
        "getter",
        "callback",
        "policy",
        "deep",
        "user",
        "before",
        "sink",
        "active",
        "dirty",
        "value",
    )

    def __init__(
        self,
        owner: Owner | None,
        expression: str | Getter,
        callback: Callback | None = None,
        *,
        deep: bool = False,
        user: bool = False,
        lazy: bool = False,
        sync: bool = False,
        before: Callable[[], Any] | None = None,
        primary: bool = False,
        sink: ErrorSink | None = None,
    ) -> None:
        self._id = _anchor.new_observer_id()
        self.owner = owner
        if primary and owner is not None:
            owner.primary = self
        if owner is not None:
            owner.add_observer(self)

        if lazy:
            self.policy = Policy.LAZY
        elif sync:
            self.policy = Policy.SYNC
        else:
            self.policy = Policy.DEFERRED
        self.deep = deep
        self.user = user
        self.before = before
        self.callback = callback
        self.sink = sink if sink is not None else (owner if owner is not None else default_sink)
        self.active = True
        self.dirty = lazy

        _anchor.observers[self._id] = self
        _anchor.dependencies[self._id] = {}
        _anchor.new_dependencies[self._id] = {}

        if callable(expression):
            self.expression = getattr(expression, "__qualname__", repr(expression))
            self.getter = expression
        else:
            self.expression = expression
            self.getter = self._resolve_path(expression)

        self.value = None
        if not lazy:
            self.value = self.get()

    def _resolve_path(self, expression: str) -> Getter:
        accessor = parse_path(expression)
        if accessor is None:
            warn(str(PathResolutionError(expression)), self.owner)
            return _noop
        owner = self.owner
        return lambda: accessor(owner)

    @property
    def id(self) -> int:
        return self._id

    @property
    def deps(self) -> list[Subject]:
        """Subjects read during the last completed evaluation."""
        return _subjects(_anchor.dependencies.get(self._id, ()))

    @property
    def new_deps(self) -> list[Subject]:
        return _subjects(_anchor.new_dependencies.get(self._id, ()))

    # --- Evaluation ---

    def get(self) -> Any:
        """Evaluate the getter and re-collect dependencies.

        A user-facing observer whose getter fails keeps its previous value.
        """
        return self._collect().value

    def _collect(self) -> Outcome:
        try:
            with tracking(self):
                outcome = _invoke(self.getter)
                if self.deep and outcome.error is None:
                    traverse(outcome.value)
        finally:
            self.cleanup_deps()
        if outcome.error is not None:
            self._fail(outcome.error, f'getter for watcher "{self.expression}"')
            return Outcome(self.value, outcome.error)
        return outcome

    def add_dep(self, subject: Subject) -> None:
        """Record ``subject`` as read during the current evaluation."""
        sid = subject.id
        new_ids = _anchor.new_dependencies.get(self._id)
        if new_ids is None:
            return  # torn down
        if sid not in new_ids:
            new_ids[sid] = None
            if sid not in _anchor.dependencies[self._id]:
                subject.add_sub(self)

    def cleanup_deps(self) -> None:
        """Unsubscribe from subjects not read this time, then swap the sets."""
        if not self.active:
            return
        old_ids = _anchor.dependencies[self._id]
        new_ids = _anchor.new_dependencies[self._id]
        for sid in reversed(old_ids):
            if sid not in new_ids:
                subject = _anchor.subjects.get(sid)
                if subject is not None:
                    subject.remove_sub(self)
        _anchor.dependencies[self._id] = new_ids
        old_ids.clear()
        _anchor.new_dependencies[self._id] = old_ids

    # --- Scheduling ---

    def update(self) -> None:
        """Subscriber interface. Called when a dependency changes."""
        if self.policy is Policy.LAZY:
            self.dirty = True
        elif self.policy is Policy.SYNC:
            self.run()
        else:
            scheduler.schedule(self)

    def run(self) -> None:
        """Scheduler job interface. Re-evaluate and fire the callback on change."""
        if not self.active:
            return
        outcome = self._collect()
        if outcome.error is not None:
            return
        value = outcome.value
        if self.deep or is_composite(value) or _changed(value, self.value):
            old_value = self.value
            self.value = value
            self.fire(value, old_value)

    def fire(self, value: Any, old_value: Any, info: str | None = None) -> None:
        """Invoke the callback, routing failures by the ``user`` trait."""
        if self.callback is None:
            return
        with untracked():
            outcome = _invoke(self.callback, value, old_value)
        if outcome.error is not None:
            self._fail(outcome.error, info or f'callback for watcher "{self.expression}"')

    def evaluate(self) -> None:
        """Recompute a lazy observer's value now."""
        self.value = self.get()
        self.dirty = False

    def depend(self) -> None:
        """Make the current observer depend on everything this one read."""
        for subject in reversed(self.deps):
            subject.depend()

    def teardown(self) -> None:
        """Remove self from every subject's subscriber set. Idempotent."""
        if not self.active:
            return
        owner = self.owner
        if owner is not None and not owner.is_being_destroyed:
            owner.remove_observer(self)
        # new_deps is non-empty when torn down from inside its own getter.
        for subject in self.deps + self.new_deps:
            subject.remove_sub(self)
        self.active = False
        del _anchor.observers[self._id]
        del _anchor.dependencies[self._id]
        del _anchor.new_dependencies[self._id]

    def _fail(self, error: Exception, info: str) -> None:
        if not self.user:
            raise error
        self.sink.report(error, self.owner, info)

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"Observer(id={self._id}, {self.expression!r}, {self.policy.value}, {state})"


def _invoke(fn: Callable[..., Any], *args: Any) -> Outcome:
    try:
        return Outcome(fn(*args))
    except Exception as err:
        return Outcome(error=err)


def _changed(new: Any, old: Any) -> bool:
    return new is not old and new != old


def _subjects(ids: dict[int, None]) -> list[Subject]:
    return [s for s in map(_anchor.subjects.get, ids) if s is not None]
