"""Global configuration for the reactive core.

Mutate the module-level ``config`` in place:

    from rewatch.config import config

    config.error_handler = lambda err, owner, info: sentry.capture(err)
    config.max_update_count = 50
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from rewatch.owner import Owner

ErrorHandler = Callable[[BaseException, Optional["Owner"], str], None]
WarnHandler = Callable[[str, Optional["Owner"]], None]

MAX_UPDATE_COUNT = 100


@dataclass
class Config:
    """Process-wide knobs. Defaults match production behavior."""

    # Suppress warnings (path resolution, circular updates).
    silent: bool = False
    # Last-resort sink for errors no owner hook captured.
    error_handler: ErrorHandler | None = None
    # Receives warning messages instead of the logger.
    warn_handler: WarnHandler | None = None
    # When False, the first schedule() flushes on the spot. Debugging aid.
    async_mode: bool = True
    # How many times one observer may be re-queued within a single flush.
    max_update_count: int = MAX_UPDATE_COUNT

    def reset(self) -> None:
        """Restore every option to its default."""
        defaults = Config()
        for field in fields(self):
            setattr(self, field.name, getattr(defaults, field.name))


config = Config()
