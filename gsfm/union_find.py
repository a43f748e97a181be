"""Disjoint sets with path compression."""

from __future__ import annotations

from typing import Dict, Generic, Hashable, TypeVar

T = TypeVar("T", bound=Hashable)


class UnionFind(Generic[T]):
    """Disjoint-set forest; unknown elements start as their own set."""

    def __init__(self) -> None:
        self._parent: Dict[T, T] = {}

    def find(self, x: T) -> T:
        parent = self._parent
        if x not in parent:
            parent[x] = x
            return x
        root = x
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def union(self, x: T, y: T) -> None:
        """Merge the sets of ``x`` and ``y``; the root of ``y`` becomes the root."""
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x != root_y:
            self._parent[root_x] = root_y

    def clear(self) -> None:
        self._parent.clear()

    def __contains__(self, x: object) -> bool:
        return x in self._parent

    def __len__(self) -> int:
        return len(self._parent)