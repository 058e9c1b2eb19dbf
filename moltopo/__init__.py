"""moltopo: molecular structure model and bond topology inference.

Usage::

    from moltopo import TopologyBuilder, auto_parser, write_pdb

    structure = auto_parser("complex.pdb").parse("complex.pdb")
    topology = TopologyBuilder().build(structure)
    with open("out.pdb", "w") as fh:
        write_pdb(topology, fh)
"""

from moltopo.core.errors import (
    MissingInternalTemplate,
    MissingUserTemplate,
    MoltopoError,
    TopologyAtomMissing,
    TopologyError,
)
from moltopo.model import (
    Atom,
    Bond,
    BondOrder,
    Chain,
    Element,
    Grid,
    Point,
    Residue,
    ResidueCategory,
    ResiduePosition,
    StandardResidue,
    Structure,
    Template,
    Topology,
)
from moltopo.ops import CleanConfig, Transform, TopologyBuilder, clean_structure
from moltopo.parsers import auto_parser, load_templates, read_structure
from moltopo.templates import TemplateRegistry, default_registry
from moltopo.writers import write_mmcif, write_pdb

__version__ = "0.1.0"

__all__ = [
    "Atom",
    "Bond",
    "BondOrder",
    "Chain",
    "CleanConfig",
    "Element",
    "Grid",
    "MissingInternalTemplate",
    "MissingUserTemplate",
    "MoltopoError",
    "Point",
    "Residue",
    "ResidueCategory",
    "ResiduePosition",
    "StandardResidue",
    "Structure",
    "Template",
    "TemplateRegistry",
    "Topology",
    "TopologyAtomMissing",
    "TopologyBuilder",
    "TopologyError",
    "Transform",
    "auto_parser",
    "clean_structure",
    "default_registry",
    "load_templates",
    "read_structure",
    "write_mmcif",
    "write_pdb",
]
