"""Which atoms a terminal residue may legitimately lack.

A structure often omits explicit terminal hydrogens. The table below lists,
per (terminal position, polymer class), the atom names whose absence is
tolerated when a template bond refers to them.
"""

from __future__ import annotations

from typing import Optional

from moltopo.model.types import PolymerClass, ResiduePosition

OPTIONAL_TERMINAL_ATOMS: dict[tuple[ResiduePosition, PolymerClass], frozenset[str]] = {
    (ResiduePosition.N_TERMINAL, PolymerClass.PROTEIN): frozenset({"H", "H1", "H2", "H3"}),
    (ResiduePosition.C_TERMINAL, PolymerClass.PROTEIN): frozenset({"HXT", "HOXT"}),
    (ResiduePosition.FIVE_PRIME, PolymerClass.NUCLEIC): frozenset({"HO5'"}),
    (ResiduePosition.THREE_PRIME, PolymerClass.NUCLEIC): frozenset({"HO3'"}),
}


def is_optional_terminal_atom(
    position: ResiduePosition,
    polymer_class: Optional[PolymerClass],
    atom_name: str,
) -> bool:
    if polymer_class is None:
        return False
    return atom_name in OPTIONAL_TERMINAL_ATOMS.get((position, polymer_class), frozenset())
