"""Uniform spatial grid for fixed-radius proximity queries.

Space is partitioned into cubic cells of side ``cell_size``. Each cell keeps
the index of its first item in ``head``; each item keeps the index of the
next item in the same cell in ``next`` (``SENTINEL`` ends a bucket). This
avoids a per-cell container and gives O(1) average bucket lookup.

Queries come in two phases:

    grid.neighbors(center, r)          # candidates (cell-granular superset)
    grid.neighbors(center, r).exact()  # only items with |p - center| <= r

The grid is read-only after construction; concurrent queries are safe.
"""

from __future__ import annotations

import math
from typing import Callable, Generic, Iterable, Iterator, TypeVar

import numpy as np

from moltopo.model.geometry import Point

T = TypeVar("T")

SENTINEL = -1
_EPSILON = 1e-6


class Grid(Generic[T]):
    """Uniform cubic-cell spatial hash over ``(position, payload)`` pairs."""

    def __init__(self, items: Iterable[tuple[Point, T]], cell_size: float):
        if not cell_size > 0.0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self._items: list[tuple[Point, T]] = list(items)

        n = len(self._items)
        if n == 0:
            self.origin = Point.origin()
            self.dims = (0, 0, 0)
            self._head = np.zeros(0, dtype=np.int64)
            self._next = np.zeros(0, dtype=np.int64)
            return

        coords = np.array([p.coords for p, _ in self._items], dtype=float)
        lo = coords.min(axis=0)
        hi = coords.max(axis=0) + _EPSILON
        extent = hi - lo

        self.origin = Point.from_iterable(lo)
        self.dims = tuple(max(1, int(math.ceil(e / self.cell_size))) for e in extent)

        dx, dy, dz = self.dims
        self._head = np.full(dx * dy * dz, SENTINEL, dtype=np.int64)
        self._next = np.full(n, SENTINEL, dtype=np.int64)

        cells = np.floor((coords - lo) / self.cell_size).astype(np.int64)
        cells = np.minimum(cells, np.array(self.dims) - 1)
        for i, (x, y, z) in enumerate(cells):
            cell = x + y * dx + z * dx * dy
            self._next[i] = self._head[cell]
            self._head[cell] = i

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    @property
    def cell_count(self) -> int:
        return len(self._head)

    def neighbors(self, center: Point, radius: float) -> "GridNeighborhood[T]":
        """Candidate items from every cell overlapping the query box."""
        return GridNeighborhood(self, center, radius)

    def has_neighbor(self, point: Point, radius: float, predicate: Callable[[T], bool]) -> bool:
        """True if any *candidate* payload satisfies ``predicate``.

        The candidate set is cell-granular; callers needing exact containment
        must check distance inside the predicate.
        """
        for item in self.neighbors(point, radius):
            if predicate(item):
                return True
        return False

    # -- internals --------------------------------------------------------

    def _cell_range(self, center: Point, radius: float):
        """Clamped inclusive cell bounds of the query box, or None when disjoint."""
        if not self._items or radius < 0.0:
            return None
        lo = []
        hi = []
        for c, o, d in zip(center.coords, self.origin.coords, self.dims):
            a = math.floor((c - radius - o) / self.cell_size)
            b = math.floor((c + radius - o) / self.cell_size)
            if b < 0 or a >= d:
                return None
            lo.append(max(0, a))
            hi.append(min(d - 1, b))
        return lo, hi

    def _iter_indices(self, center: Point, radius: float) -> Iterator[int]:
        bounds = self._cell_range(center, radius)
        if bounds is None:
            return
        (x0, y0, z0), (x1, y1, z1) = bounds
        dx, dy, _ = self.dims
        head = self._head
        nxt = self._next
        for z in range(z0, z1 + 1):
            for y in range(y0, y1 + 1):
                row = y * dx + z * dx * dy
                for x in range(x0, x1 + 1):
                    i = int(head[row + x])
                    while i != SENTINEL:
                        yield i
                        i = int(nxt[i])

    def _item(self, idx: int) -> tuple[Point, T]:
        return self._items[idx]

    def __repr__(self) -> str:
        return f"<Grid items={len(self)} dims={self.dims} cell_size={self.cell_size}>"


class GridNeighborhood(Generic[T]):
    """Lazy candidate sequence for one query; every ``iter()`` restarts it."""

    def __init__(self, grid: Grid[T], center: Point, radius: float):
        self._grid = grid
        self.center = center
        self.radius = radius

    def __iter__(self) -> Iterator[T]:
        for i in self._grid._iter_indices(self.center, self.radius):
            yield self._grid._item(i)[1]

    def with_positions(self) -> Iterator[tuple[Point, T]]:
        for i in self._grid._iter_indices(self.center, self.radius):
            yield self._grid._item(i)

    def exact(self) -> Iterator[T]:
        """Only payloads whose stored position lies within ``radius`` of the center."""
        radius_sq = self.radius * self.radius
        center = self.center
        for pos, item in self.with_positions():
            if pos.distance_squared(center) <= radius_sq:
                yield item
