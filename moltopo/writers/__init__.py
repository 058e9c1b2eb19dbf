"""Structure / topology writers (PDB with CONECT, mmCIF with _struct_conn)."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from moltopo.model.structure import Structure
from moltopo.model.topology import Topology
from moltopo.writers.mmcif import save_mmcif, write_mmcif
from moltopo.writers.pdb import save_pdb, write_pdb

__all__ = ["save_mmcif", "save_pdb", "write_mmcif", "write_pdb", "save_structure"]


def save_structure(obj: Union[Structure, Topology], path: Path) -> None:
    """Write by extension: ``.cif``/``.mmcif`` -> mmCIF, anything else -> PDB."""
    path = Path(path)
    if path.suffix.lower() in (".cif", ".mmcif"):
        save_mmcif(obj, path)
    else:
        save_pdb(obj, path)
