from __future__ import annotations

from dataclasses import dataclass, field

from moltopo.core.logging_utils import get_logger
from moltopo.model.structure import Structure
from moltopo.model.types import ResidueCategory, StandardResidue

logger = get_logger(__name__)


@dataclass
class CleanConfig:
    """What to strip from a structure before topology inference.

    ``keep_residue_names`` wins over every removal rule.
    """

    remove_water: bool = False
    remove_ions: bool = False
    remove_hydrogens: bool = False
    remove_hetero: bool = False
    remove_residue_names: set[str] = field(default_factory=set)
    keep_residue_names: set[str] = field(default_factory=set)

    @classmethod
    def water_only(cls) -> "CleanConfig":
        return cls(remove_water=True)

    @classmethod
    def water_and_ions(cls) -> "CleanConfig":
        return cls(remove_water=True, remove_ions=True)


def clean_structure(structure: Structure, config: CleanConfig) -> Structure:
    """Apply ``config`` in place and return the same structure.

    Chains left without residues are dropped. Flat atom indices change, so any
    topology built earlier must be rebuilt.
    """
    before = (structure.residue_count, structure.atom_count)

    if config.remove_hydrogens:
        for residue in structure.iter_residues():
            residue.strip_hydrogens()

    def keep(_chain_id: str, residue) -> bool:
        if residue.name in config.keep_residue_names:
            return True
        if residue.name in config.remove_residue_names:
            return False
        if config.remove_water and residue.standard_name is StandardResidue.HOH:
            return False
        if config.remove_ions and residue.category is ResidueCategory.ION:
            return False
        if config.remove_hetero and residue.category is ResidueCategory.HETERO:
            return False
        return True

    structure.retain_residues(keep)
    structure.prune_empty_chains()

    logger.info(
        "Cleaned structure: residues %d -> %d, atoms %d -> %d",
        before[0], structure.residue_count, before[1], structure.atom_count,
    )
    return structure
