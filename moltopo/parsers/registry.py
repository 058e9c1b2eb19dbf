from __future__ import annotations

from pathlib import Path

from moltopo.core.errors import ParseError
from moltopo.model.structure import Structure
from moltopo.parsers.base import StructureParser

_REGISTRY: dict[str, type[StructureParser]] = {}


def register_parser(parser_cls: type[StructureParser]) -> None:
    """Register a parser class for its declared extensions."""
    for ext in parser_cls.extensions():
        _REGISTRY[ext.lower()] = parser_cls


def _ensure_registry() -> None:
    if _REGISTRY:
        return
    from moltopo.parsers.mmcif import CIFParser
    from moltopo.parsers.pdb_format import PDBFormatParser
    register_parser(CIFParser)
    register_parser(PDBFormatParser)


def auto_parser(path: str | Path) -> StructureParser:
    """Return the appropriate parser for a file path based on extension."""
    _ensure_registry()
    name = str(path).lower()
    for ext in sorted(_REGISTRY, key=len, reverse=True):
        if name.endswith(ext):
            return _REGISTRY[ext]()
    available = sorted(set(_REGISTRY.keys()))
    raise ParseError("structure", f"no parser for this extension. Supported: {available}", str(path))


def read_structure(path: str | Path) -> Structure:
    """Parse ``path`` with the parser registered for its extension."""
    return auto_parser(path).parse(Path(path))
