"""Bond inference from coordinates, residue templates and linkage rules.

Two phases over one ``Structure``:

    1. intra-residue   template bonds, template hydrogens, terminal atoms
    2. inter-residue   peptide C-N, nucleic O3'-P, disulfide SG-SG

Atoms are addressed by flat index (chain -> residue -> atom order). The
resulting bond list is canonical and deduplicated on the atom pair; the first
discovered bond for a pair wins.

Usage::

    topology = (
        TopologyBuilder()
        .add_template(ligand_template)
        .disulfide_cutoff(2.5)
        .build(structure)
    )
"""

from __future__ import annotations

from typing import Iterable, Optional

from moltopo.config import MoltopoSettings
from moltopo.core.errors import (
    MissingInternalTemplate,
    MissingUserTemplate,
    TopologyAtomMissing,
)
from moltopo.core.logging_utils import get_logger
from moltopo.model.grid import Grid
from moltopo.model.residue import Residue
from moltopo.model.structure import Structure
from moltopo.model.template import Template
from moltopo.model.topology import Bond, Topology
from moltopo.model.types import BondOrder, ResidueCategory, ResiduePosition
from moltopo.ops.terminals import is_optional_terminal_atom
from moltopo.templates.registry import TemplateRegistry, default_registry

logger = get_logger(__name__)

DEFAULT_DISULFIDE_CUTOFF = 2.2
DEFAULT_PEPTIDE_CUTOFF = 1.5
DEFAULT_NUCLEIC_CUTOFF = 1.8

DISULFIDE_RESIDUES = frozenset({"CYX", "CYM"})
N_TERMINAL_HYDROGENS = ("H1", "H2", "H3")
C_TERMINAL_HYDROGENS = ("HXT", "HOXT")


def _check_cutoff(name: str, value: float) -> float:
    if not value > 0.0:
        raise ValueError(f"{name} cutoff must be positive, got {value}")
    return float(value)


class _BondList:
    """Ordered, pair-deduplicated bond accumulator."""

    def __init__(self):
        self._bonds: dict[tuple[int, int], Bond] = {}

    def add(self, idx1: int, idx2: int, order: BondOrder = BondOrder.SINGLE) -> bool:
        bond = Bond(idx1, idx2, order)
        if bond.pair in self._bonds:
            return False
        self._bonds[bond.pair] = bond
        return True

    def __len__(self) -> int:
        return len(self._bonds)

    def bonds(self) -> list[Bond]:
        return list(self._bonds.values())


class TopologyBuilder:
    """Configurable bond inference for a ``Structure``.

    Setters return the builder so calls chain. User templates are keyed by
    residue name; adding a template with an existing name replaces it.
    """

    def __init__(self, registry: Optional[TemplateRegistry] = None):
        self._registry = registry
        self._user_templates: dict[str, Template] = {}
        self._disulfide_cutoff = DEFAULT_DISULFIDE_CUTOFF
        self._peptide_cutoff = DEFAULT_PEPTIDE_CUTOFF
        self._nucleic_cutoff = DEFAULT_NUCLEIC_CUTOFF

    @classmethod
    def from_settings(
        cls,
        settings: MoltopoSettings,
        registry: Optional[TemplateRegistry] = None,
    ) -> "TopologyBuilder":
        return (
            cls(registry)
            .disulfide_cutoff(settings.disulfide_cutoff)
            .peptide_cutoff(settings.peptide_cutoff)
            .nucleic_cutoff(settings.nucleic_cutoff)
        )

    # -- configuration ----------------------------------------------------

    def add_template(self, template: Template) -> "TopologyBuilder":
        self._user_templates[template.name] = template
        return self

    def add_templates(self, templates: Iterable[Template]) -> "TopologyBuilder":
        for t in templates:
            self.add_template(t)
        return self

    def disulfide_cutoff(self, cutoff: float) -> "TopologyBuilder":
        self._disulfide_cutoff = _check_cutoff("Disulfide", cutoff)
        return self

    def peptide_cutoff(self, cutoff: float) -> "TopologyBuilder":
        self._peptide_cutoff = _check_cutoff("Peptide", cutoff)
        return self

    def nucleic_cutoff(self, cutoff: float) -> "TopologyBuilder":
        self._nucleic_cutoff = _check_cutoff("Nucleic", cutoff)
        return self

    @property
    def registry(self) -> TemplateRegistry:
        if self._registry is None:
            self._registry = default_registry()
        return self._registry

    @property
    def user_templates(self) -> dict[str, Template]:
        return dict(self._user_templates)

    @property
    def cutoffs(self) -> dict[str, float]:
        return {
            "disulfide": self._disulfide_cutoff,
            "peptide": self._peptide_cutoff,
            "nucleic": self._nucleic_cutoff,
        }

    # -- build ------------------------------------------------------------

    def build(self, structure: Structure) -> Topology:
        """Infer every bond of ``structure``.

        Raises a ``TopologyError`` subtype on the first unresolvable residue;
        no partial topology is returned.
        """
        bonds = _BondList()
        offsets = structure.residue_offsets()

        self._build_intra_residue(structure, offsets, bonds)
        n_intra = len(bonds)
        logger.debug("Intra-residue phase: %d bonds", n_intra)

        n_links = self._build_polymer_links(structure, offsets, bonds)
        n_disulfide = self._build_disulfides(structure, offsets, bonds)
        logger.debug("Inter-residue phase: %d linkage, %d disulfide", n_links, n_disulfide)

        topology = Topology(structure, bonds.bonds())
        logger.info(
            "Topology built: %d atoms, %d bonds (%d disulfide)",
            topology.atom_count, topology.bond_count, n_disulfide,
        )
        return topology

    # -- phase 1 ----------------------------------------------------------

    def _build_intra_residue(
        self,
        structure: Structure,
        offsets: list[list[int]],
        bonds: _BondList,
    ) -> None:
        for chain, chain_offsets in zip(structure.chains, offsets):
            for residue, offset in zip(chain, chain_offsets):
                category = residue.category
                if category is ResidueCategory.ION:
                    continue

                if category in (ResidueCategory.STANDARD, ResidueCategory.WATER):
                    tmpl = self.registry.get(residue.name)
                    if tmpl is None:
                        raise MissingInternalTemplate(residue.name)
                    for a1, a2, order in tmpl.bonds:
                        self._try_add_bond(residue, offset, a1, a2, order, bonds)
                    for h in tmpl.hydrogens:
                        anchor = h.primary_anchor
                        if anchor is not None and residue.has_atom(h.name):
                            self._try_add_bond(residue, offset, h.name, anchor, BondOrder.SINGLE, bonds)
                    if category is ResidueCategory.STANDARD:
                        self._add_terminal_bonds(residue, offset, bonds)

                elif category is ResidueCategory.HETERO:
                    user = self._user_templates.get(residue.name)
                    if user is None:
                        raise MissingUserTemplate(residue.name)
                    for a1, a2, order in user.bonds:
                        self._try_add_bond(residue, offset, a1, a2, order, bonds)

    def _try_add_bond(
        self,
        residue: Residue,
        offset: int,
        name1: str,
        name2: str,
        order: BondOrder,
        bonds: _BondList,
    ) -> None:
        idx1 = residue.atom_index(name1)
        idx2 = residue.atom_index(name2)
        if idx1 is not None and idx2 is not None:
            bonds.add(offset + idx1, offset + idx2, order)
            return

        polymer = residue.polymer_class
        if idx1 is None and is_optional_terminal_atom(residue.position, polymer, name1):
            return
        if idx2 is None and is_optional_terminal_atom(residue.position, polymer, name2):
            return
        missing = name1 if idx1 is None else name2
        raise TopologyAtomMissing(residue.name, residue.id, missing)

    def _add_terminal_bonds(self, residue: Residue, offset: int, bonds: _BondList) -> None:
        position = residue.position

        if residue.is_protein and position is ResiduePosition.N_TERMINAL:
            n_idx = residue.atom_index("N")
            if n_idx is not None:
                for h_name in N_TERMINAL_HYDROGENS:
                    h_idx = residue.atom_index(h_name)
                    if h_idx is not None:
                        bonds.add(offset + h_idx, offset + n_idx)

        elif residue.is_protein and position is ResiduePosition.C_TERMINAL:
            c_idx = residue.atom_index("C")
            oxt_idx = residue.atom_index("OXT")
            if c_idx is not None and oxt_idx is not None:
                bonds.add(offset + c_idx, offset + oxt_idx)
                for h_name in C_TERMINAL_HYDROGENS:
                    h_idx = residue.atom_index(h_name)
                    if h_idx is not None:
                        bonds.add(offset + oxt_idx, offset + h_idx)

        elif residue.is_nucleic and position is ResiduePosition.FIVE_PRIME:
            self._bond_named_pair(residue, offset, "HO5'", "O5'", bonds)

        elif residue.is_nucleic and position is ResiduePosition.THREE_PRIME:
            self._bond_named_pair(residue, offset, "HO3'", "O3'", bonds)

    @staticmethod
    def _bond_named_pair(residue: Residue, offset: int, name1: str, name2: str, bonds: _BondList) -> None:
        idx1 = residue.atom_index(name1)
        idx2 = residue.atom_index(name2)
        if idx1 is not None and idx2 is not None:
            bonds.add(offset + idx1, offset + idx2)

    # -- phase 2 ----------------------------------------------------------

    def _build_polymer_links(
        self,
        structure: Structure,
        offsets: list[list[int]],
        bonds: _BondList,
    ) -> int:
        added = 0
        for chain, chain_offsets in zip(structure.chains, offsets):
            residues = chain.residues
            for i in range(len(residues) - 1):
                curr, nxt = residues[i], residues[i + 1]
                if curr.category is not ResidueCategory.STANDARD:
                    continue
                if nxt.category is not ResidueCategory.STANDARD:
                    continue
                if curr.standard_name is None or nxt.standard_name is None:
                    continue

                if curr.is_protein and nxt.is_protein:
                    names, cutoff = ("C", "N"), self._peptide_cutoff
                elif curr.is_nucleic and nxt.is_nucleic:
                    names, cutoff = ("O3'", "P"), self._nucleic_cutoff
                else:
                    continue

                if self._connect_if_close(
                    curr, chain_offsets[i], names[0],
                    nxt, chain_offsets[i + 1], names[1],
                    cutoff, bonds,
                ):
                    added += 1
        return added

    @staticmethod
    def _connect_if_close(
        res1: Residue,
        offset1: int,
        name1: str,
        res2: Residue,
        offset2: int,
        name2: str,
        cutoff: float,
        bonds: _BondList,
    ) -> bool:
        idx1 = res1.atom_index(name1)
        idx2 = res2.atom_index(name2)
        if idx1 is None or idx2 is None:
            return False
        a1 = res1.atoms[idx1]
        a2 = res2.atoms[idx2]
        if a1.distance_squared(a2) > cutoff * cutoff:
            return False
        return bonds.add(offset1 + idx1, offset2 + idx2)

    def _build_disulfides(
        self,
        structure: Structure,
        offsets: list[list[int]],
        bonds: _BondList,
    ) -> int:
        sulfurs = []
        for chain, chain_offsets in zip(structure.chains, offsets):
            for residue, offset in zip(chain, chain_offsets):
                if residue.name not in DISULFIDE_RESIDUES:
                    continue
                sg_idx = residue.atom_index("SG")
                if sg_idx is not None:
                    sulfurs.append((offset + sg_idx, residue.atoms[sg_idx].pos))
        if len(sulfurs) < 2:
            return 0

        cutoff = self._disulfide_cutoff
        grid = Grid(((pos, k) for k, (_, pos) in enumerate(sulfurs)), cell_size=cutoff)
        added = 0
        for i, (idx1, pos1) in enumerate(sulfurs):
            partners = sorted(j for j in grid.neighbors(pos1, cutoff).exact() if j > i)
            for j in partners:
                if bonds.add(idx1, sulfurs[j][0]):
                    added += 1
        return added
