"""moltopo.parsers: structure and template readers.

Architecture:
    - base.py: StructureParser protocol, AtomRecord rows, StructureAssembler
    - pdb_format.py: PDBFormatParser (PDB format)
    - mmcif.py: CIFParser (mmCIF format)
    - mol2.py: Mol2TemplateParser + load_templates (user hetero templates)
    - registry.py: register_parser / auto_parser by file extension

Usage::

    from moltopo.parsers import auto_parser, load_templates

    structure = auto_parser("1abc.cif").parse("1abc.cif")
    templates = load_templates(["ligands/"])
"""

from moltopo.parsers.base import (
    AtomRecord,
    StructureAssembler,
    StructureParser,
    assign_terminal_positions,
    classify_residue,
)
from moltopo.parsers.mmcif import CIFParser
from moltopo.parsers.mol2 import Mol2TemplateParser, load_template_file, load_templates
from moltopo.parsers.pdb_format import PDBFormatParser
from moltopo.parsers.registry import auto_parser, read_structure, register_parser

__all__ = [
    "AtomRecord",
    "StructureAssembler",
    "StructureParser",
    "assign_terminal_positions",
    "classify_residue",
    "CIFParser",
    "PDBFormatParser",
    "Mol2TemplateParser",
    "load_template_file",
    "load_templates",
    "auto_parser",
    "read_structure",
    "register_parser",
]
