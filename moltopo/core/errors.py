"""Exception hierarchy for moltopo.

Hierarchy:
    MoltopoError
    ├── StructureError
    │   ├── DuplicateAtomError
    │   └── DuplicateResidueError
    ├── TemplateError
    ├── TopologyError
    │   ├── MissingInternalTemplate
    │   ├── MissingUserTemplate
    │   └── TopologyAtomMissing
    ├── ParseError
    └── WriterError

Every topology error aborts the build; callers fix the input and rebuild.
"""

from __future__ import annotations

from typing import Optional


class MoltopoError(Exception):
    """Base class for all domain errors raised by moltopo."""


# ======================================================================
# Structure model
# ======================================================================

class StructureError(MoltopoError, ValueError):
    """Malformed structure hierarchy."""


class DuplicateAtomError(StructureError):
    def __init__(self, res_name: str, atom_name: str):
        self.res_name = res_name
        self.atom_name = atom_name
        super().__init__(f"Duplicate atom name '{atom_name}' in residue '{res_name}'")


class DuplicateResidueError(StructureError):
    def __init__(self, chain_id: str, res_id: int, insertion_code: Optional[str] = None):
        self.chain_id = chain_id
        self.res_id = res_id
        self.insertion_code = insertion_code
        label = f"{res_id}{insertion_code or ''}"
        super().__init__(f"Duplicate residue id '{label}' in chain '{chain_id}'")


class TemplateError(MoltopoError, ValueError):
    """Invalid template definition."""


# ======================================================================
# Topology build
# ======================================================================

class TopologyError(MoltopoError):
    """A topology build failed; no partial topology is produced."""


class MissingInternalTemplate(TopologyError):
    """A standard residue has no built-in template."""

    def __init__(self, res_name: str):
        self.res_name = res_name
        super().__init__(f"No built-in template for standard residue '{res_name}'")


class MissingUserTemplate(TopologyError):
    """A hetero residue has no user-supplied template."""

    def __init__(self, res_name: str):
        self.res_name = res_name
        super().__init__(f"No user template registered for hetero residue '{res_name}'")


class TopologyAtomMissing(TopologyError):
    """A template bond references an atom absent from the residue."""

    def __init__(self, res_name: str, res_id: int, atom_name: str):
        self.res_name = res_name
        self.res_id = res_id
        self.atom_name = atom_name
        super().__init__(
            f"Atom '{atom_name}' required by template is missing from residue "
            f"'{res_name}' {res_id}"
        )


# ======================================================================
# I/O
# ======================================================================

class ParseError(MoltopoError):
    def __init__(self, fmt: str, message: str, path: Optional[str] = None):
        self.fmt = fmt
        self.path = path
        where = f" ({path})" if path else ""
        super().__init__(f"{fmt}{where}: {message}")


class WriterError(MoltopoError):
    def __init__(self, fmt: str, message: str):
        self.fmt = fmt
        super().__init__(f"{fmt}: {message}")
