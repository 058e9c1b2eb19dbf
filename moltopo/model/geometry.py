"""3D point/vector value type."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np


@dataclass(frozen=True)
class Point:
    """Immutable double-precision 3D coordinate.

    Used both for positions and displacement vectors (``Vector`` is an alias).
    """

    x: float
    y: float
    z: float

    @staticmethod
    def origin() -> "Point":
        return Point(0.0, 0.0, 0.0)

    @staticmethod
    def from_iterable(values: Iterable[float]) -> "Point":
        x, y, z = (float(v) for v in values)
        return Point(x, y, z)

    @property
    def coords(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def as_array(self) -> np.ndarray:
        return np.array(self.coords, dtype=float)

    def __iter__(self) -> Iterator[float]:
        return iter(self.coords)

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y, -self.z)

    def __mul__(self, k: float) -> "Point":
        return Point(self.x * k, self.y * k, self.z * k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> "Point":
        return Point(self.x / k, self.y / k, self.z / k)

    def dot(self, other: "Point") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def distance_squared(self, other: "Point") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return dx * dx + dy * dy + dz * dz

    def distance(self, other: "Point") -> float:
        return math.sqrt(self.distance_squared(other))

    def angle(self, other: "Point") -> float:
        """Angle in radians between two vectors."""
        denom = self.norm() * other.norm()
        if denom == 0.0:
            return 0.0
        cos = max(-1.0, min(1.0, self.dot(other) / denom))
        return math.acos(cos)


Vector = Point


# ======================================================================
# Unit cell <-> lattice vectors
# ======================================================================

def box_vectors_from_cell(
    a: float,
    b: float,
    c: float,
    alpha: float,
    beta: float,
    gamma: float,
) -> tuple[Point, Point, Point]:
    """Lattice vectors from cell lengths and angles (degrees).

    ``v1`` lies along x and ``v2`` in the xy plane (PDB convention).
    """
    al, be, ga = (math.radians(v) for v in (alpha, beta, gamma))
    cos_a, cos_b, cos_g = math.cos(al), math.cos(be), math.cos(ga)
    sin_g = math.sin(ga)
    cy = (cos_a - cos_b * cos_g) / sin_g
    cz = math.sqrt(max(0.0, 1.0 - cos_b * cos_b - cy * cy))
    v1 = Point(a, 0.0, 0.0)
    v2 = Point(b * cos_g, b * sin_g, 0.0)
    v3 = Point(c * cos_b, c * cy, c * cz)
    return v1, v2, v3


def cell_from_box_vectors(
    vectors: tuple[Point, Point, Point],
) -> tuple[float, float, float, float, float, float]:
    """``(a, b, c, alpha, beta, gamma)`` with angles in degrees."""
    v1, v2, v3 = vectors
    a, b, c = v1.norm(), v2.norm(), v3.norm()
    alpha = math.degrees(v2.angle(v3))
    beta = math.degrees(v1.angle(v3))
    gamma = math.degrees(v1.angle(v2))
    return a, b, c, alpha, beta, gamma
