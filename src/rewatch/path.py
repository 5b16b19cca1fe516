"""Dotted-path accessors for string watch expressions.

``parse_path("user.address.city")`` returns a function that walks the
segments from a root object. Each hop reads through whatever reactive
container it meets, so every hop is tracked.
"""

from __future__ import annotations

import re
from typing import Any, Callable

# Anything beyond identifiers, digits and dots needs a real function.
_BAIL = re.compile(r"[^\w.$]")


def parse_path(path: str) -> Callable[[Any], Any] | None:
    """Compile ``path`` into an accessor, or None if it is not a simple path."""
    if not path or _BAIL.search(path):
        return None
    segments = path.split(".")
    if any(not segment for segment in segments):
        return None

    def accessor(obj: Any) -> Any:
        for segment in segments:
            if obj is None:
                return None
            obj = _step(obj, segment)
        return obj

    return accessor


def _step(obj: Any, key: str) -> Any:
    if hasattr(obj, "keys") and hasattr(obj, "get"):
        value = obj.get(key)
    elif key.isdigit() and hasattr(obj, "__getitem__"):
        try:
            value = obj[int(key)]
        except IndexError:
            return None
    else:
        value = getattr(obj, key, None)
    # Unwrap single-value reactive cells (Observable, Computed) so the read is tracked.
    unwrap = getattr(value, "_path_value", None)
    return unwrap() if unwrap is not None else value
