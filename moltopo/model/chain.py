from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from moltopo.core.errors import DuplicateResidueError
from moltopo.model.atom import Atom
from moltopo.model.residue import Residue


@dataclass
class Chain:
    """Single chain of residues, in declaration order."""

    id: str
    _residues: list[Residue] = field(default_factory=list, init=False, repr=False)

    def add_residue(self, residue: Residue) -> None:
        if self.residue(residue.id, residue.insertion_code) is not None:
            raise DuplicateResidueError(self.id, residue.id, residue.insertion_code)
        self._residues.append(residue)

    def residue(self, id: int, insertion_code: Optional[str] = None) -> Optional[Residue]:
        for r in self._residues:
            if r.id == id and r.insertion_code == insertion_code:
                return r
        return None

    @property
    def residues(self) -> tuple[Residue, ...]:
        return tuple(self._residues)

    @property
    def residue_count(self) -> int:
        return len(self._residues)

    @property
    def atom_count(self) -> int:
        return sum(r.atom_count for r in self._residues)

    def is_empty(self) -> bool:
        return not self._residues

    def iter_atoms(self) -> Iterator[Atom]:
        for r in self._residues:
            yield from r

    def retain_residues(self, predicate) -> None:
        self._residues = [r for r in self._residues if predicate(r)]

    def __len__(self) -> int:
        return len(self._residues)

    def __iter__(self) -> Iterator[Residue]:
        return iter(self._residues)

    def __str__(self) -> str:
        return f'Chain {{ id: "{self.id}", residues: {self.residue_count} }}'
