"""Tests for deep traversal and deep observers."""

from dataclasses import dataclass

from rewatch import (
    Observable,
    ObservableDict,
    ObservableList,
    Observer,
    flush,
    get_pending_count,
    traverse,
)


@dataclass
class Box:
    content: Observable


class TestTraverse:
    def test_plain_cycles_terminate(self):
        d = {}
        d["me"] = d
        traverse([d, d, (d,)])

    def test_very_deep_structure(self):
        root = []
        cur = root
        for _ in range(5000):
            nxt = []
            cur.append(nxt)
            cur = nxt
        traverse(root)

    def test_scalars_and_types_are_skipped(self):
        traverse(["a", b"b", 1, 2.0, None, True, ObservableList])

    def test_registers_nested_reactive_values(self):
        inner = ObservableDict({"done": False})
        items = ObservableList([inner])
        leaf = Observable(1)
        inner["leaf"] = leaf

        observer = Observer(None, lambda: {"items": items}, deep=True)
        assert set(map(id, observer.deps)) == {
            id(items.subject),
            id(inner.subject),
            id(leaf.subject),
        }

    def test_reactive_cycle_registers_once(self):
        od = ObservableDict()
        od["me"] = od
        observer = Observer(None, lambda: od, deep=True)
        assert observer.deps == [od.subject]

    def test_catch_all_getattr_is_not_walked(self):
        held = Observable("x")

        class Proxy:
            def __getattr__(self, name):
                return lambda: [held]

        observer = Observer(None, lambda: Proxy(), deep=True)
        assert observer.deps == []
        assert held.subject.subscribers == []

    def test_dataclass_fields(self):
        box = Box(Observable(3))
        observer = Observer(None, lambda: box, deep=True)
        assert observer.deps == [box.content.subject]


class TestDeepObserver:
    def test_nested_mutation_fires(self):
        inner = ObservableDict({"done": False})
        items = ObservableList([inner])
        state = Observable(items)
        calls = []
        Observer(None, state.get, lambda new, old: calls.append((new, old)), deep=True)

        inner["done"] = True
        flush()
        assert calls == [(items, items)]

    def test_shallow_observer_ignores_nested_mutation(self):
        inner = ObservableDict({"done": False})
        items = ObservableList([inner])
        state = Observable(items)
        Observer(None, state.get, lambda new, old: None)

        inner["done"] = True
        assert get_pending_count() == 0
