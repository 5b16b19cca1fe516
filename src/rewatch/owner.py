"""Owner — the context that creates observers and answers for them.

An Owner holds a schema of named Observables, the registry of every
Observer created against it, lifecycle hooks, and its place in a parent
chain for error capture. Dotted watch paths resolve against its keys:

    owner = Owner({"user": ObservableDict({"name": "Ada"})})
    unwatch = owner.watch("user.name", lambda new, old: print(old, "->", new))
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

from rewatch._tracking import untracked
from rewatch.action import action
from rewatch.computed import Computed
from rewatch.errors import handle_error
from rewatch.observable import Observable
from rewatch.observer import Observer
from rewatch.scheduler import scheduler

logger = logging.getLogger("rewatch.owner")

Hook = Callable[..., Any]


class Owner:
    """Key-based Observable container with an observer registry and lifecycle."""

    def __init__(
        self,
        schema: dict[str, object] | None = None,
        initial: dict | None = None,
        *,
        parent: Owner | None = None,
        name: str | None = None,
    ) -> None:
        self.name = name or type(self).__name__
        self.parent = parent
        self.observers: list[Observer] = []
        self.primary: Observer | None = None
        self.is_being_destroyed = False
        self.is_destroyed = False
        self.inactive = False
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._observables: dict[str, Observable] = {}
        for key, default in (schema or {}).items():
            value = initial.get(key, default) if initial else default
            self._observables[key] = Observable(value)

    # --- State ---

    def get(self, key: str) -> object:
        obs = self._observables.get(key)
        return obs.get() if obs is not None else None

    def set(self, key: str, value: object) -> None:
        obs = self._observables.get(key)
        if obs is not None:
            obs.set(value)

    def keys(self):
        return self._observables.keys()

    def __getitem__(self, key: str) -> object:
        return self.get(key)

    def __setitem__(self, key: str, value: object) -> None:
        self.set(key, value)

    @action
    def update(self, values: dict) -> None:
        for key, value in values.items():
            self.set(key, value)

    # --- Observer registry ---

    def add_observer(self, observer: Observer) -> None:
        self.observers.append(observer)

    def remove_observer(self, observer: Observer) -> None:
        try:
            self.observers.remove(observer)
        except ValueError:
            pass  # already removed

    def watch(
        self,
        expression: str | Callable[[], Any],
        callback: Callable[[Any, Any], Any],
        *,
        deep: bool = False,
        immediate: bool = False,
        sync: bool = False,
        before: Callable[[], Any] | None = None,
    ) -> Callable[[], None]:
        """Watch an expression or function. Returns a function that stops it.

        Errors raised by the expression or the callback are reported
        through this owner instead of propagating.
        """
        observer = Observer(
            self, expression, callback, deep=deep, user=True, sync=sync, before=before
        )
        if immediate:
            observer.fire(
                observer.value, None, f'callback for immediate watcher "{observer.expression}"'
            )
        return observer.teardown

    def computed(self, fn: Callable[[], Any]) -> Computed:
        """Create a Computed registered on this owner."""
        return Computed(fn, owner=self)

    # --- Errors ---

    def report(self, error: BaseException, owner: Owner | None, info: str) -> None:
        """ErrorSink interface. Routes through error_captured hooks and config."""
        handle_error(error, owner if owner is not None else self, info)

    # --- Lifecycle ---

    def on(self, hook: str, fn: Hook | None = None) -> Any:
        """Register a lifecycle hook. Without ``fn``, returns a decorator."""
        if fn is None:
            return lambda f: self.on(hook, f)
        self._hooks[hook].append(fn)
        return fn

    def hooks(self, hook: str) -> list[Hook]:
        return list(self._hooks.get(hook, ()))

    def call_hook(self, hook: str) -> None:
        """Invoke every handler for ``hook`` with dependency tracking suspended."""
        with untracked():
            for fn in self.hooks(hook):
                try:
                    fn(self)
                except Exception as err:
                    self.report(err, self, f"{hook} hook")

    def activate(self) -> None:
        """Queue the activated hook to fire after the next flush."""
        scheduler.queue_activated(self)

    def destroy(self) -> None:
        """Tear down every observer created against this owner. Idempotent."""
        if self.is_being_destroyed:
            return
        self.call_hook("before_destroy")
        self.is_being_destroyed = True
        if self.primary is not None:
            self.primary.teardown()
        for observer in reversed(self.observers):
            observer.teardown()
        self.observers.clear()
        self.is_destroyed = True
        self.call_hook("destroyed")
        logger.debug("Destroyed %s", self.name)

    def __repr__(self) -> str:
        return f"<{self.name}>"
