"""Textual integration for rewatch. Opt-in — requires textual.

install(app) makes the app's message loop the cooperative point where
deferred observers flush. The guarded autorun/reaction/watch helpers skip
while the widget tree is paused or the app is not running, and swallow
NoMatches from widget queries made during the flush.
"""

from contextlib import contextmanager

from textual.css.query import NoMatches

from rewatch import autorun as _autorun, reaction as _reaction
from rewatch.scheduler import set_scheduler

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


def install(app) -> None:
    """Flush deferred observers on the app's next idle (``app.call_later``)."""
    set_scheduler(app.call_later)


@contextmanager
def pause(app):
    """Suspend guarded callbacks during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, fn):
    def _guarded(*args):
        if not is_safe(app):
            return
        try:
            fn(*args)
        except NoMatches:
            pass

    return _guarded


def reaction(app, data_fn, effect_fn, *, fire_immediately=False):
    """reaction() whose effect only touches widgets while the app is safe."""
    return _reaction(data_fn, _guard(app, effect_fn), fire_immediately=fire_immediately)


def autorun(app, fn):
    """autorun() that skips while the app is paused or not running.

    Dependencies are only collected on runs that pass the guard.
    """
    return _autorun(_guard(app, fn))


def watch(app, owner, expression, callback, **options):
    """owner.watch() with a guarded callback."""
    return owner.watch(expression, _guard(app, callback), **options)
