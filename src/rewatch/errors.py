"""Error hierarchy and routing.

User-facing observers never let getter or callback failures escape: they
hand them to an ``ErrorSink``. The default sink walks the owner's parent
chain (``error_captured`` hooks), then ``config.error_handler``, then logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from rewatch._tracking import untracked
from rewatch.config import config

if TYPE_CHECKING:
    from rewatch.owner import Owner

logger = logging.getLogger("rewatch.errors")


class ReactivityError(Exception):
    """Base error for all rewatch diagnostics."""


class PathResolutionError(ReactivityError):
    """A watch expression is not a simple dot-delimited path."""

    def __init__(self, expression: str) -> None:
        super().__init__(
            f'Failed watching path: "{expression}" '
            "Watcher only accepts simple dot-delimited paths. "
            "For full control, use a function instead."
        )
        self.expression = expression


class CircularUpdateError(ReactivityError):
    """An observer kept re-queuing itself within one flush."""

    def __init__(self, observer: Any) -> None:
        super().__init__(
            "You may have an infinite update loop in watcher "
            f'with expression "{observer.expression}"'
        )
        self.observer = observer


class ErrorSink(Protocol):
    """Anything that accepts routed evaluation failures."""

    def report(self, error: BaseException, owner: Owner | None, info: str) -> None: ...


def handle_error(error: BaseException, owner: Owner | None, info: str) -> None:
    """Route ``error`` through the owner chain, then the global handler."""
    with untracked():
        cur = owner
        while cur is not None:
            for hook in cur.hooks("error_captured"):
                try:
                    capture = hook(error, cur, info) is False
                except Exception as hook_error:
                    _global_handle_error(hook_error, cur, "error_captured hook")
                    continue
                if capture:
                    return
            cur = cur.parent
        _global_handle_error(error, owner, info)


def _global_handle_error(error: BaseException, owner: Owner | None, info: str) -> None:
    if config.error_handler is not None:
        try:
            config.error_handler(error, owner, info)
            return
        except Exception as handler_error:
            # The handler may re-raise the same error on purpose.
            if handler_error is not error:
                _log_error(handler_error, None, "config.error_handler")
    _log_error(error, owner, info)


def _log_error(error: BaseException, owner: Owner | None, info: str) -> None:
    logger.error("Error in %s%s: %r", info, _describe(owner), error, exc_info=error)


def warn(message: str, owner: Owner | None = None) -> None:
    """Emit a diagnostic through ``config.warn_handler`` or the logger."""
    if config.warn_handler is not None:
        config.warn_handler(message, owner)
    elif not config.silent:
        logger.warning("%s%s", message, _describe(owner))


def _describe(owner: Owner | None) -> str:
    if owner is None:
        return ""
    return f" (found in {owner!r})"


class _DefaultSink:
    """Sink used by observers created without an owner."""

    def report(self, error: BaseException, owner: Owner | None, info: str) -> None:
        handle_error(error, owner, info)


default_sink: ErrorSink = _DefaultSink()
