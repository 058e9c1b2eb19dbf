"""Structure model: primitives, hierarchy, templates, spatial grid and topology.

Hierarchy:
    Structure
    ├── box_vectors
    └── chains: list[Chain]
        └── residues: list[Residue]
            └── atoms: list[Atom]
"""

from moltopo.model.atom import Atom
from moltopo.model.chain import Chain
from moltopo.model.geometry import Point, Vector
from moltopo.model.grid import Grid, GridNeighborhood
from moltopo.model.residue import Residue
from moltopo.model.structure import Structure
from moltopo.model.template import Template
from moltopo.model.topology import Bond, Topology
from moltopo.model.types import (
    BondOrder,
    Element,
    PolymerClass,
    ResidueCategory,
    ResiduePosition,
    StandardResidue,
)

__all__ = [
    "Atom",
    "Bond",
    "BondOrder",
    "Chain",
    "Element",
    "Grid",
    "GridNeighborhood",
    "Point",
    "PolymerClass",
    "Residue",
    "ResidueCategory",
    "ResiduePosition",
    "StandardResidue",
    "Structure",
    "Template",
    "Topology",
    "Vector",
]
