from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

import pandas as pd

from moltopo.model.structure import Structure
from moltopo.model.types import BondOrder


@dataclass(frozen=True)
class Bond:
    """Bond between two flat atom indices.

    Always canonical: ``a1_idx <= a2_idx``, so a bond and its reverse compare
    and hash identically.
    """

    a1_idx: int
    a2_idx: int
    order: BondOrder = BondOrder.SINGLE

    def __post_init__(self) -> None:
        if self.a1_idx > self.a2_idx:
            a1, a2 = self.a2_idx, self.a1_idx
            object.__setattr__(self, "a1_idx", a1)
            object.__setattr__(self, "a2_idx", a2)

    @classmethod
    def new(cls, idx1: int, idx2: int, order: BondOrder = BondOrder.SINGLE) -> "Bond":
        return cls(idx1, idx2, order)

    @property
    def pair(self) -> tuple[int, int]:
        return (self.a1_idx, self.a2_idx)

    def contains(self, atom_idx: int) -> bool:
        return atom_idx == self.a1_idx or atom_idx == self.a2_idx

    def other(self, atom_idx: int) -> int:
        if atom_idx == self.a1_idx:
            return self.a2_idx
        if atom_idx == self.a2_idx:
            return self.a1_idx
        raise ValueError(f"Atom {atom_idx} is not part of {self}")


class Topology:
    """A structure plus its bond list.

    Produced once by ``TopologyBuilder.build`` and not mutated afterwards;
    rebuild it when the structure changes.
    """

    def __init__(self, structure: Structure, bonds: Iterable[Bond]):
        self._structure = structure
        self._bonds = list(bonds)
        n = structure.atom_count
        for b in self._bonds:
            if b.a2_idx >= n or b.a1_idx < 0:
                raise ValueError(f"Bond {b} references an atom outside 0..{n - 1}")

    @property
    def structure(self) -> Structure:
        return self._structure

    @property
    def bonds(self) -> tuple[Bond, ...]:
        return tuple(self._bonds)

    @property
    def bond_count(self) -> int:
        return len(self._bonds)

    @property
    def atom_count(self) -> int:
        return self._structure.atom_count

    def bond_set(self) -> frozenset[Bond]:
        return frozenset(self._bonds)

    def bonds_of(self, atom_idx: int) -> Iterator[Bond]:
        return (b for b in self._bonds if b.contains(atom_idx))

    def neighbors_of(self, atom_idx: int) -> Iterator[int]:
        return (b.other(atom_idx) for b in self.bonds_of(atom_idx))

    # -- tabular export ---------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        """One row per bond with both partners' chain/residue/atom labels."""
        context = list(self._structure.iter_atoms_with_context())
        rows = []
        for b in self._bonds:
            c1, r1, a1 = context[b.a1_idx]
            c2, r2, a2 = context[b.a2_idx]
            rows.append({
                "a1_idx": b.a1_idx,
                "a2_idx": b.a2_idx,
                "order": b.order.value,
                "chain1": c1.id,
                "res_name1": r1.name,
                "res_id1": r1.id,
                "atom1": a1.name,
                "chain2": c2.id,
                "res_name2": r2.name,
                "res_id2": r2.id,
                "atom2": a2.name,
                "distance": a1.distance(a2),
            })
        columns = [
            "a1_idx", "a2_idx", "order",
            "chain1", "res_name1", "res_id1", "atom1",
            "chain2", "res_name2", "res_id2", "atom2",
            "distance",
        ]
        return pd.DataFrame(rows, columns=columns)

    def save_bonds(self, path: Path) -> None:
        """Write the bond table as parquet (``.parquet``) or CSV (anything else)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        df = self.to_frame()
        if path.suffix == ".parquet":
            df.to_parquet(path, index=False)
        else:
            df.to_csv(path, index=False)

    def __repr__(self) -> str:
        return f"<Topology atoms={self.atom_count} bonds={self.bond_count}>"

    def __str__(self) -> str:
        return f"Topology {{ atoms: {self.atom_count}, bonds: {self.bond_count} }}"
