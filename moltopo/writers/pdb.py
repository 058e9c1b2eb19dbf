"""PDB format writer.

Layout::

    CRYST1            (only when the structure has box vectors)
    ATOM / HETATM     (standard protein / nucleic residues -> ATOM)
    TER               (after each chain, labelled with its last standard residue)
    CONECT            (topology only; sorted, deduplicated, 4 partners per line)
    END
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import TextIO, Union

from moltopo.core.errors import WriterError
from moltopo.core.logging_utils import get_logger
from moltopo.model.atom import Atom
from moltopo.model.geometry import cell_from_box_vectors
from moltopo.model.residue import Residue
from moltopo.model.structure import BoxVectors, Structure
from moltopo.model.topology import Topology
from moltopo.model.types import ResidueCategory

logger = get_logger(__name__)


def _truncate(value: int, modulus: int) -> int:
    """Remainder with the sign of ``value`` (fixed-width columns wrap around)."""
    return value - int(value / modulus) * modulus


def _format_atom_name(name: str) -> str:
    if len(name) >= 4:
        return name[:4]
    return f" {name:<3}"


def _record_type(residue: Residue) -> str:
    return "ATOM" if residue.is_polymer else "HETATM"


class _PDBWriter:
    def __init__(self, fh: TextIO):
        self.fh = fh
        self.serial = 1
        self.index_to_serial: dict[int, int] = {}

    def write_cryst1(self, box: BoxVectors | None) -> None:
        if box is None:
            return
        a, b, c, alpha, beta, gamma = cell_from_box_vectors(box)
        self.fh.write(
            f"CRYST1{a:9.3f}{b:9.3f}{c:9.3f}{alpha:7.2f}{beta:7.2f}{gamma:7.2f} P 1           1\n"
        )

    def write_atoms(self, structure: Structure) -> None:
        flat = 0
        for chain in structure.chains:
            chain_char = chain.id[:1] or " "
            for residue in chain:
                record = _record_type(residue)
                for atom in residue:
                    self.index_to_serial[flat] = self.serial
                    self._write_atom(record, atom, residue, chain_char)
                    self.serial += 1
                    flat += 1

            last_standard = None
            for residue in chain:
                if residue.category is ResidueCategory.STANDARD:
                    last_standard = residue
            if last_standard is not None:
                self._write_ter(last_standard, chain_char)
                self.serial += 1

    def _write_atom(self, record: str, atom: Atom, residue: Residue, chain_char: str) -> None:
        p = atom.pos
        self.fh.write(
            f"{record:<6}{_truncate(self.serial, 100000):>5} "
            f"{_format_atom_name(atom.name):<4} {residue.name[:3]:<3} "
            f"{chain_char}{_truncate(residue.id, 10000):>4}{residue.insertion_code or ' '}   "
            f"{p.x:8.3f}{p.y:8.3f}{p.z:8.3f}{1.0:6.2f}{0.0:6.2f}          "
            f"{atom.element.symbol.upper():>2}\n"
        )

    def _write_ter(self, residue: Residue, chain_char: str) -> None:
        self.fh.write(
            f"TER   {_truncate(self.serial, 100000):>5}      {residue.name[:3]:<3} "
            f"{chain_char}{_truncate(residue.id, 10000):>4}{residue.insertion_code or ' '}\n"
        )

    def write_conect(self, topology: Topology) -> None:
        adjacency: dict[int, set[int]] = defaultdict(set)
        for bond in topology.bonds:
            s1 = self._serial_of(bond.a1_idx)
            s2 = self._serial_of(bond.a2_idx)
            adjacency[s1].add(s2)
            adjacency[s2].add(s1)

        for src in sorted(adjacency):
            targets = sorted(adjacency[src])
            for start in range(0, len(targets), 4):
                chunk = "".join(f"{t:>5}" for t in targets[start:start + 4])
                self.fh.write(f"CONECT{src:>5}{chunk}\n")

    def _serial_of(self, idx: int) -> int:
        try:
            return self.index_to_serial[idx]
        except KeyError:
            raise WriterError("PDB", f"bond references atom index {idx} that was not written") from None

    def write_end(self) -> None:
        self.fh.write("END   \n")


def write_pdb(obj: Union[Structure, Topology], fh: TextIO) -> None:
    """Write a structure, or a topology including CONECT records, to ``fh``."""
    topology = obj if isinstance(obj, Topology) else None
    structure = topology.structure if topology is not None else obj

    writer = _PDBWriter(fh)
    writer.write_cryst1(structure.box_vectors)
    writer.write_atoms(structure)
    if topology is not None:
        writer.write_conect(topology)
    writer.write_end()


def save_pdb(obj: Union[Structure, Topology], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as fh:
        write_pdb(obj, fh)
    logger.debug("Wrote PDB %s", path)
