"""Deep touch — register every nested field of a value as a dependency.

Deep observers need this: mutating ``state["items"][3]["done"]`` leaves the
outer value identical, so only a subscription to the nested field notices.

Iterative with an explicit stack and an identity-seen set, so cyclic and
very deep structures are walked once without recursion limits.
"""

from __future__ import annotations

import dataclasses
from typing import Any

_SCALARS = (str, bytes, bytearray, int, float, complex, bool, type(None))


def traverse(value: Any) -> None:
    """Read every reachable nested value while the current observer tracks."""
    seen: set[int] = set()
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, _SCALARS):
            continue
        if id(item) in seen:
            continue
        seen.add(id(item))

        # Reactive containers yield their children through tracked reads.
        # Looked up on the class so a catch-all __getattr__ never matches.
        children = getattr(type(item), "_deep_children", None)
        if callable(children) and not isinstance(item, type):
            stack.extend(children(item))
        elif isinstance(item, dict):
            stack.extend(item.values())
        elif isinstance(item, (list, tuple, set, frozenset)):
            stack.extend(item)
        elif dataclasses.is_dataclass(item) and not isinstance(item, type):
            stack.extend(getattr(item, f.name) for f in dataclasses.fields(item))
