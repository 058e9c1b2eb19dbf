from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from moltopo.core.errors import DuplicateAtomError
from moltopo.model.atom import Atom
from moltopo.model.types import (
    Element,
    PolymerClass,
    ResidueCategory,
    ResiduePosition,
    StandardResidue,
)


@dataclass
class Residue:
    """Single residue (amino acid, nucleotide, ligand, ion or water).

    Atoms keep their insertion order; that order, together with the chain and
    residue order, defines the flat atom indices bonds refer to.
    ``standard_name`` is derived from ``name`` unless given explicitly.
    """

    id: int
    name: str
    category: ResidueCategory = ResidueCategory.STANDARD
    position: ResiduePosition = ResiduePosition.NONE
    insertion_code: Optional[str] = None
    standard_name: Optional[StandardResidue] = None
    _atoms: list[Atom] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.standard_name is None:
            self.standard_name = StandardResidue.from_name(self.name)

    @classmethod
    def with_atoms(
        cls,
        id: int,
        name: str,
        atoms: Iterable[Atom],
        category: ResidueCategory = ResidueCategory.STANDARD,
        position: ResiduePosition = ResiduePosition.NONE,
    ) -> "Residue":
        res = cls(id=id, name=name, category=category, position=position)
        for atom in atoms:
            res.add_atom(atom)
        return res

    # -- atoms ------------------------------------------------------------

    def add_atom(self, atom: Atom) -> None:
        if self.has_atom(atom.name):
            raise DuplicateAtomError(self.name, atom.name)
        self._atoms.append(atom)

    def remove_atom(self, name: str) -> Optional[Atom]:
        idx = self.atom_index(name)
        if idx is None:
            return None
        return self._atoms.pop(idx)

    def atom(self, name: str) -> Optional[Atom]:
        for a in self._atoms:
            if a.name == name:
                return a
        return None

    def atom_index(self, name: str) -> Optional[int]:
        """Local position of the named atom within this residue."""
        for i, a in enumerate(self._atoms):
            if a.name == name:
                return i
        return None

    def has_atom(self, name: str) -> bool:
        return self.atom_index(name) is not None

    @property
    def atoms(self) -> tuple[Atom, ...]:
        return tuple(self._atoms)

    @property
    def atom_count(self) -> int:
        return len(self._atoms)

    def is_empty(self) -> bool:
        return not self._atoms

    def strip_hydrogens(self) -> None:
        self._atoms = [a for a in self._atoms if a.element is not Element.H]

    def __len__(self) -> int:
        return len(self._atoms)

    def __iter__(self) -> Iterator[Atom]:
        return iter(self._atoms)

    # -- classification ---------------------------------------------------

    @property
    def polymer_class(self) -> Optional[PolymerClass]:
        if self.standard_name is None:
            return None
        return self.standard_name.polymer_class

    @property
    def is_protein(self) -> bool:
        return self.standard_name is not None and self.standard_name.is_protein

    @property
    def is_nucleic(self) -> bool:
        return self.standard_name is not None and self.standard_name.is_nucleic

    @property
    def is_polymer(self) -> bool:
        """Standard protein or nucleic residue (written as ATOM records)."""
        return self.is_protein or self.is_nucleic

    def __str__(self) -> str:
        return (
            f'Residue {{ id: {self.id}, name: "{self.name}", '
            f"category: {self.category}, atoms: {self.atom_count} }}"
        )
