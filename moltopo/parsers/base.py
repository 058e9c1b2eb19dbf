"""Shared parsing machinery: parser protocol and structure assembly.

Format readers only tokenize their files into ``AtomRecord`` rows. The
``StructureAssembler`` turns those rows into the model hierarchy:

    AtomRecord rows (file order)
    └── StructureAssembler
        ├── chains in order of first appearance
        ├── residues keyed by (res_seq, ins_code) within a chain
        ├── first alternate location kept per atom
        ├── residue category (standard / water / ion / hetero)
        └── polymer terminal positions
"""

from __future__ import annotations

import gzip
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from moltopo.core.logging_utils import get_logger
from moltopo.model.atom import Atom
from moltopo.model.chain import Chain
from moltopo.model.geometry import Point
from moltopo.model.residue import Residue
from moltopo.model.structure import BoxVectors, Structure
from moltopo.model.types import (
    Element,
    PolymerClass,
    ResidueCategory,
    ResiduePosition,
    StandardResidue,
)

logger = get_logger(__name__)

# Single-atom residue names treated as ions.
ION_NAMES = frozenset({
    "NA", "K", "LI", "RB", "CS", "MG", "CA", "SR", "BA", "MN", "FE", "FE2",
    "CO", "NI", "CU", "CU1", "ZN", "CD", "HG", "CL", "BR", "IOD", "F",
    "NA+", "K+", "CL-", "MG2", "ZN2", "CA2",
})


def classify_residue(name: str) -> ResidueCategory:
    """Residue category from its name alone."""
    key = name.strip().upper()
    std = StandardResidue.from_name(key)
    if std is not None and std.is_water:
        return ResidueCategory.WATER
    if std is not None:
        return ResidueCategory.STANDARD
    if key in ION_NAMES:
        return ResidueCategory.ION
    return ResidueCategory.HETERO


def assign_terminal_positions(chain: Chain) -> None:
    """Tag first/last polymer residues of a chain as terminal, the rest internal.

    Protein and nucleic residues are handled independently. A lone polymer
    residue is tagged N-terminal (protein) or 5' (nucleic).
    """
    for polymer, first_pos, last_pos in (
        (PolymerClass.PROTEIN, ResiduePosition.N_TERMINAL, ResiduePosition.C_TERMINAL),
        (PolymerClass.NUCLEIC, ResiduePosition.FIVE_PRIME, ResiduePosition.THREE_PRIME),
    ):
        members = [
            r for r in chain
            if r.category is ResidueCategory.STANDARD and r.polymer_class is polymer
        ]
        if not members:
            continue
        for r in members:
            r.position = ResiduePosition.INTERNAL
        members[-1].position = last_pos
        members[0].position = first_pos


@dataclass(frozen=True)
class AtomRecord:
    """One coordinate row as read from a structure file."""

    chain_id: str
    res_name: str
    res_seq: int
    atom_name: str
    x: float
    y: float
    z: float
    element: str = ""
    ins_code: str = ""
    alt_loc: str = ""
    hetatm: bool = False

    @property
    def pos(self) -> Point:
        return Point(self.x, self.y, self.z)

    def resolve_element(self) -> Element:
        if self.element:
            el = Element.from_symbol(self.element)
            if el is not Element.UNKNOWN:
                return el
        return Element.guess(self.atom_name, self.res_name)


class StructureAssembler:
    """Accumulates ``AtomRecord`` rows into a ``Structure``."""

    def __init__(self):
        self._chains: dict[str, Chain] = {}
        self._residues: dict[tuple[str, int, str], Residue] = {}
        self._alt_seen: dict[tuple[str, int, str, str], str] = {}
        self.box_vectors: Optional[BoxVectors] = None
        self.skipped_alt = 0

    def add(self, rec: AtomRecord) -> None:
        res_key = (rec.chain_id, rec.res_seq, rec.ins_code)
        atom_key = res_key + (rec.atom_name,)
        if rec.alt_loc:
            first = self._alt_seen.setdefault(atom_key, rec.alt_loc)
            if first != rec.alt_loc:
                self.skipped_alt += 1
                return

        chain = self._chains.get(rec.chain_id)
        if chain is None:
            chain = Chain(rec.chain_id)
            self._chains[rec.chain_id] = chain

        residue = self._residues.get(res_key)
        if residue is None:
            residue = Residue(
                id=rec.res_seq,
                name=rec.res_name,
                category=classify_residue(rec.res_name),
                insertion_code=rec.ins_code or None,
            )
            chain.add_residue(residue)
            self._residues[res_key] = residue

        residue.add_atom(Atom(rec.atom_name, rec.resolve_element(), rec.pos))

    def add_all(self, records: Iterable[AtomRecord]) -> None:
        for rec in records:
            self.add(rec)

    @property
    def atom_count(self) -> int:
        return sum(c.atom_count for c in self._chains.values())

    def build(self) -> Structure:
        chains = list(self._chains.values())
        for chain in chains:
            assign_terminal_positions(chain)
        if self.skipped_alt:
            logger.debug("Skipped %d alternate-location atoms", self.skipped_alt)
        return Structure(chains=chains, box_vectors=self.box_vectors)


# ======================================================================
# Parser protocol
# ======================================================================

def read_lines(path: Path) -> list[str]:
    """Read a text file, transparently decompressing ``.gz``."""
    path = Path(path)
    opener = gzip.open if path.suffix == ".gz" else open
    mode = "rt" if path.suffix == ".gz" else "r"
    with opener(path, mode, encoding="utf-8", errors="ignore") as f:
        return f.readlines()


class StructureParser(ABC):
    """Parse a file into a ``Structure``. One parser per format."""

    format_name: str = ""

    def parse(self, path: Path) -> Structure:
        """Parse a file and return a Structure."""
        path = Path(path)
        return self.parse_lines(read_lines(path), source=str(path))

    def parse_text(self, text: str) -> Structure:
        return self.parse_lines(text.splitlines(keepends=True))

    @abstractmethod
    def parse_lines(self, lines: list[str], source: Optional[str] = None) -> Structure:
        ...

    @staticmethod
    @abstractmethod
    def extensions() -> list[str]:
        """File extensions this parser handles (e.g. ['.cif', '.cif.gz'])."""
        ...
