from __future__ import annotations

from dataclasses import dataclass

from moltopo.model.geometry import Point, Vector
from moltopo.model.types import Element


@dataclass
class Atom:
    """Single atom: name (unique within its residue), element and position."""

    name: str
    element: Element
    pos: Point

    def distance_squared(self, other: "Atom") -> float:
        return self.pos.distance_squared(other.pos)

    def distance(self, other: "Atom") -> float:
        return self.pos.distance(other.pos)

    def translate_by(self, vector: Vector) -> None:
        self.pos = self.pos + vector

    @property
    def is_hydrogen(self) -> bool:
        return self.element is Element.H

    def __str__(self) -> str:
        return (
            f'Atom {{ name: "{self.name}", element: {self.element}, '
            f"pos: [{self.pos.x:.3f}, {self.pos.y:.3f}, {self.pos.z:.3f}] }}"
        )
