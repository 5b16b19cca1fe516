"""Data anchor — id-keyed arenas that hold the subscription graph.

Subjects and Observers never hold references to each other. Edges are
integer ids stored here, so tearing down an Observer is a matter of
removing ids. Dicts with ``None`` values serve as insertion-ordered sets.
"""

import itertools
import weakref

# Subject state. The arena does not own Subjects; a Subject lives as long as
# the reactive value holding it, and its subscriber set is dropped with it.
subjects: "weakref.WeakValueDictionary[int, object]" = weakref.WeakValueDictionary()
subscribers: dict[int, dict[int, None]] = {}  # subject_id -> observer ids

# Observer state. Observers stay registered until teardown().
observers: dict[int, object] = {}
dependencies: dict[int, dict[int, None]] = {}  # observer_id -> subject ids
new_dependencies: dict[int, dict[int, None]] = {}

# ID generation
_subject_ids = itertools.count(1)
_observer_ids = itertools.count(1)


def new_subject_id() -> int:
    return next(_subject_ids)


def new_observer_id() -> int:
    return next(_observer_ids)
