"""Top-level structure container.

Hierarchy:
    Structure
    ├── box_vectors: optional periodic box (three lattice vectors)
    └── chains: list[Chain]
        └── residues: list[Residue]
            └── atoms: list[Atom]

The chain -> residue -> atom traversal order is the single source of truth
for flat atom indices. Any mutation that removes or reorders atoms
invalidates indices held by a previously built Topology.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional

import numpy as np

from moltopo.model.atom import Atom
from moltopo.model.chain import Chain
from moltopo.model.geometry import Point, Vector
from moltopo.model.residue import Residue

BoxVectors = tuple[Vector, Vector, Vector]


@dataclass
class Structure:
    chains: list[Chain] = field(default_factory=list)
    box_vectors: Optional[BoxVectors] = None

    def add_chain(self, chain: Chain) -> None:
        self.chains.append(chain)

    def chain(self, chain_id: str) -> Optional[Chain]:
        for c in self.chains:
            if c.id == chain_id:
                return c
        return None

    @property
    def chain_ids(self) -> list[str]:
        return [c.id for c in self.chains]

    @property
    def chain_count(self) -> int:
        return len(self.chains)

    @property
    def residue_count(self) -> int:
        return sum(c.residue_count for c in self.chains)

    @property
    def atom_count(self) -> int:
        return sum(c.atom_count for c in self.chains)

    # -- traversal (flat index order) -------------------------------------

    def iter_residues(self) -> Iterator[Residue]:
        for c in self.chains:
            yield from c

    def iter_atoms(self) -> Iterator[Atom]:
        for c in self.chains:
            yield from c.iter_atoms()

    def iter_atoms_with_context(self) -> Iterator[tuple[Chain, Residue, Atom]]:
        for c in self.chains:
            for r in c:
                for a in r:
                    yield c, r, a

    def residue_offsets(self) -> list[list[int]]:
        """Flat index of the first atom of every residue, per chain."""
        offsets: list[list[int]] = []
        current = 0
        for c in self.chains:
            chain_offsets = []
            for r in c:
                chain_offsets.append(current)
                current += r.atom_count
            offsets.append(chain_offsets)
        return offsets

    # -- mutation ---------------------------------------------------------

    def retain_residues(self, predicate: Callable[[str, Residue], bool]) -> None:
        """Keep residues for which ``predicate(chain_id, residue)`` is true."""
        for c in self.chains:
            c.retain_residues(lambda r, cid=c.id: predicate(cid, r))

    def prune_empty_chains(self) -> None:
        self.chains = [c for c in self.chains if not c.is_empty()]

    # -- geometry ---------------------------------------------------------

    def coordinates(self) -> np.ndarray:
        """Atom positions as an ``(N, 3)`` array in flat index order."""
        coords = [a.pos.coords for a in self.iter_atoms()]
        if not coords:
            return np.zeros((0, 3))
        return np.asarray(coords, dtype=float)

    def geometric_center(self) -> Point:
        coords = self.coordinates()
        if len(coords) == 0:
            return Point.origin()
        return Point.from_iterable(coords.mean(axis=0))

    def center_of_mass(self) -> Point:
        coords = self.coordinates()
        if len(coords) == 0:
            return Point.origin()
        masses = np.array([a.element.atomic_mass for a in self.iter_atoms()])
        total = masses.sum()
        if total == 0.0:
            return self.geometric_center()
        return Point.from_iterable((coords * masses[:, None]).sum(axis=0) / total)

    @classmethod
    def from_chains(cls, chains: Iterable[Chain], box_vectors: Optional[BoxVectors] = None) -> "Structure":
        return cls(chains=list(chains), box_vectors=box_vectors)

    def __str__(self) -> str:
        return (
            f"Structure {{ chains: {self.chain_count}, residues: {self.residue_count}, "
            f"atoms: {self.atom_count} }}"
        )
