"""Dependency graph between cell names with recalculation ordering."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


class CircularReferenceError(ValueError):
    """Raised when a cell would (transitively) depend on itself."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Circular reference detected involving: {name}")
        self.name = name


@dataclass(frozen=True)
class GraphSnapshot:
    """Edges around a set of names, as captured by DependencyGraph.snapshot.

    ``None`` marks a name that had no edges in that direction.
    """

    dependents: dict[str, dict[str, None] | None]
    dependees: dict[str, dict[str, None] | None]
    size: int


class DependencyGraph:
    """Mirrored edge index of ordered pairs ``(dependee, dependent)``.

    A pair ``(A, B)`` means B's value depends on A. Both directions are
    stored so dependents and dependees are O(1) to reach. A name is only a
    key while it has at least one edge in that direction.

    Inner mappings are dicts used as insertion-ordered sets, so traversal
    order depends only on the order edges were added.
    """

    __slots__ = ("_dependents", "_dependees", "_size")

    def __init__(self) -> None:
        # dependee -> cells that read from it
        self._dependents: dict[str, dict[str, None]] = {}
        # dependent -> cells it reads from
        self._dependees: dict[str, dict[str, None]] = {}
        self._size = 0

    @property
    def size(self) -> int:
        """Number of ordered pairs in the graph."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def has_dependents(self, name: str) -> bool:
        return name in self._dependents

    def has_dependees(self, name: str) -> bool:
        return name in self._dependees

    def dependents(self, name: str) -> set[str]:
        """Cells whose value depends directly on *name*."""
        return set(self._dependents.get(name, ()))

    def dependees(self, name: str) -> set[str]:
        """Cells that *name* depends on directly."""
        return set(self._dependees.get(name, ()))

    def add_dependency(self, dependee: str, dependent: str) -> None:
        """Add ``(dependee, dependent)``. Adding an existing pair is a no-op."""
        targets = self._dependents.setdefault(dependee, {})
        if dependent in targets:
            return
        targets[dependent] = None
        self._dependees.setdefault(dependent, {})[dependee] = None
        self._size += 1

    def remove_dependency(self, dependee: str, dependent: str) -> None:
        """Remove ``(dependee, dependent)`` if present."""
        targets = self._dependents.get(dependee)
        if targets is None or dependent not in targets:
            return
        del targets[dependent]
        if not targets:
            del self._dependents[dependee]
        sources = self._dependees[dependent]
        del sources[dependee]
        if not sources:
            del self._dependees[dependent]
        self._size -= 1

    def replace_dependents(self, name: str, new_dependents: Iterable[str]) -> None:
        """Replace every ``(name, x)`` pair with ``(name, y)`` for y in *new_dependents*."""
        for old in list(self._dependents.get(name, ())):
            self.remove_dependency(name, old)
        for new in new_dependents:
            self.add_dependency(name, new)

    def replace_dependees(self, name: str, new_dependees: Iterable[str]) -> None:
        """Replace every ``(x, name)`` pair with ``(y, name)`` for y in *new_dependees*."""
        for old in list(self._dependees.get(name, ())):
            self.remove_dependency(old, name)
        for new in new_dependees:
            self.add_dependency(new, name)

    def ordered_dependees(self, name: str) -> list[str]:
        """Dependees of *name* in insertion order."""
        return list(self._dependees.get(name, ()))

    def snapshot(self, names: Iterable[str]) -> GraphSnapshot:
        """Copy the edges touching *names*, keeping their insertion order.

        Restoring the snapshot undoes any edge changes confined to those
        names, including the order later traversals see.
        """
        dependents: dict[str, dict[str, None] | None] = {}
        dependees: dict[str, dict[str, None] | None] = {}
        for name in names:
            found = self._dependents.get(name)
            dependents[name] = None if found is None else dict(found)
            found = self._dependees.get(name)
            dependees[name] = None if found is None else dict(found)
        return GraphSnapshot(dependents, dependees, self._size)

    def restore(self, snapshot: GraphSnapshot) -> None:
        """Put back the edges captured by :meth:`snapshot`."""
        for target, saved in (
            (self._dependents, snapshot.dependents),
            (self._dependees, snapshot.dependees),
        ):
            for name, edges in saved.items():
                if edges is None:
                    target.pop(name, None)
                else:
                    target[name] = dict(edges)
        self._size = snapshot.size

    def recalculation_order(self, origin: str) -> list[str]:
        """Return *origin* followed by everything that depends on it, in evaluation order.

        Each name appears once and precedes all of its dependents. Uses a
        single depth-first pass over dependents; reaching *origin* again
        before the pass finishes means a cycle through it.

        Raises CircularReferenceError if *origin* depends on itself.
        """
        order: list[str] = []
        visited: set[str] = {origin}
        # Explicit stack instead of recursion; chains can be long.
        stack: list[tuple[str, Iterator[str]]] = [(origin, self._iter_dependents(origin))]
        while stack:
            name, pending = stack[-1]
            for child in pending:
                if child == origin:
                    raise CircularReferenceError(origin)
                if child not in visited:
                    visited.add(child)
                    stack.append((child, self._iter_dependents(child)))
                    break
            else:
                stack.pop()
                order.append(name)
        order.reverse()
        return order

    def _iter_dependents(self, name: str) -> Iterator[str]:
        return iter(self._dependents.get(name, ()))
