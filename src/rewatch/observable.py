"""Observable values — state that tracks its readers.

Each reactive value owns a Subject. Reading it inside an Observer's
evaluation subscribes that Observer; writing it notifies every subscriber.

ObservableList and ObservableDict implement the collections.abc mutable
protocols, so every derived method (extend, pop, setdefault, ...) goes
through the tracked/notifying primitives below.
"""

from __future__ import annotations

from collections.abc import MutableMapping, MutableSequence
from typing import Generic, Iterable, Iterator, TypeVar

from rewatch.subject import Subject

T = TypeVar("T")
KT = TypeVar("KT")
VT = TypeVar("VT")


class Observable(Generic[T]):
    """A single observable value with automatic dependency tracking."""

    __slots__ = ("_value", "_subject")

    def __init__(self, value: T) -> None:
        self._value = value
        self._subject = Subject()

    @property
    def subject(self) -> Subject:
        return self._subject

    def get(self) -> T:
        """Read the value. If inside an evaluation, registers the dependency."""
        self._subject.depend()
        return self._value

    def set(self, value: T) -> None:
        """Write a new value. Observers are only signalled if it changed."""
        old = self._value
        if old is not value and old != value:
            self._value = value
            self._subject.notify()

    def _path_value(self) -> T:
        return self.get()

    def _deep_children(self) -> tuple[T]:
        return (self.get(),)

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"


class ObservableList(MutableSequence[T], Generic[T]):
    """An observable list. Reads register a dependency, mutations notify."""

    __slots__ = ("_items", "_subject")

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._items: list[T] = list(items) if items else []
        self._subject = Subject()

    @property
    def subject(self) -> Subject:
        return self._subject

    def _deep_children(self) -> list[T]:
        self._subject.depend()
        return list(self._items)

    def __getitem__(self, index):
        self._subject.depend()
        return self._items[index]

    def __len__(self) -> int:
        self._subject.depend()
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        self._subject.depend()
        return iter(list(self._items))

    def __setitem__(self, index, value) -> None:
        self._items[index] = value
        self._subject.notify()

    def __delitem__(self, index) -> None:
        del self._items[index]
        self._subject.notify()

    def append(self, item: T) -> None:
        self._items.append(item)
        self._subject.notify()

    def insert(self, index: int, item: T) -> None:
        self._items.insert(index, item)
        self._subject.notify()

    def extend(self, items: Iterable[T]) -> None:
        self._items.extend(list(items))
        self._subject.notify()

    def clear(self) -> None:
        self._items.clear()
        self._subject.notify()

    def __repr__(self) -> str:
        return f"ObservableList({self._items!r})"


class ObservableDict(MutableMapping[KT, VT], Generic[KT, VT]):
    """An observable dict. Reads register a dependency, mutations notify."""

    __slots__ = ("_data", "_subject")

    def __init__(self, data: dict[KT, VT] | None = None) -> None:
        self._data: dict[KT, VT] = dict(data) if data else {}
        self._subject = Subject()

    @property
    def subject(self) -> Subject:
        return self._subject

    def _deep_children(self) -> list[VT]:
        self._subject.depend()
        return list(self._data.values())

    def __getitem__(self, key: KT) -> VT:
        self._subject.depend()
        return self._data[key]

    def __len__(self) -> int:
        self._subject.depend()
        return len(self._data)

    def __iter__(self) -> Iterator[KT]:
        self._subject.depend()
        return iter(list(self._data))

    def __contains__(self, key: object) -> bool:
        self._subject.depend()
        return key in self._data

    def __setitem__(self, key: KT, value: VT) -> None:
        self._data[key] = value
        self._subject.notify()

    def __delitem__(self, key: KT) -> None:
        del self._data[key]
        self._subject.notify()

    def clear(self) -> None:
        self._data.clear()
        self._subject.notify()

    def __repr__(self) -> str:
        return f"ObservableDict({self._data!r})"
