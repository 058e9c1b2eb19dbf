"""mmCIF writer: ``_cell``, ``_atom_site`` and (for topologies) ``_struct_conn``."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO, Union

from moltopo.core.errors import WriterError
from moltopo.core.logging_utils import get_logger
from moltopo.model.geometry import cell_from_box_vectors
from moltopo.model.structure import BoxVectors, Structure
from moltopo.model.topology import Topology

logger = get_logger(__name__)

DATA_BLOCK = "moltopo_export"

_ATOM_SITE_COLUMNS = (
    "group_PDB", "id", "type_symbol", "label_atom_id", "label_alt_id",
    "label_comp_id", "label_asym_id", "label_entity_id", "label_seq_id",
    "pdbx_PDB_ins_code", "Cartn_x", "Cartn_y", "Cartn_z", "occupancy",
    "B_iso_or_equiv", "auth_seq_id", "auth_comp_id", "auth_asym_id",
    "auth_atom_id",
)

_PARTNER_COLUMNS = (
    "label_atom_id", "label_alt_id", "label_comp_id", "label_asym_id",
    "label_seq_id", "PDB_ins_code", "symmetry", "auth_asym_id",
    "auth_comp_id", "auth_seq_id",
)


def quote_value(s: str) -> str:
    """Quote a CIF value when it is empty or contains whitespace or quotes."""
    if not s:
        return "?"
    if not any(c.isspace() for c in s) and "'" not in s and '"' not in s:
        return s
    if "'" in s and '"' not in s:
        return f'"{s}"'
    return f"'{s}'"


def _write_loop_header(fh: TextIO, category: str, columns) -> None:
    fh.write("loop_\n")
    for col in columns:
        fh.write(f"_{category}.{col}\n")


class _CIFWriter:
    def __init__(self, fh: TextIO):
        self.fh = fh
        self.index_to_id: dict[int, int] = {}

    def write_header(self) -> None:
        self.fh.write(f"data_{DATA_BLOCK}\n#\n")

    def write_cell(self, box: BoxVectors | None) -> None:
        if box is None:
            return
        a, b, c, alpha, beta, gamma = cell_from_box_vectors(box)
        w = self.fh.write
        w(f"_cell.entry_id           {DATA_BLOCK}\n")
        w(f"_cell.length_a           {a:.3f}\n")
        w(f"_cell.length_b           {b:.3f}\n")
        w(f"_cell.length_c           {c:.3f}\n")
        w(f"_cell.angle_alpha        {alpha:.2f}\n")
        w(f"_cell.angle_beta         {beta:.2f}\n")
        w(f"_cell.angle_gamma        {gamma:.2f}\n")
        w("_cell.Z_PDB              1\n")
        w("#\n")

    def write_atoms(self, structure: Structure) -> None:
        _write_loop_header(self.fh, "atom_site", _ATOM_SITE_COLUMNS)
        entity_ids: dict[str, int] = {}
        atom_id = 1
        flat = 0
        for chain in structure.chains:
            entity_id = entity_ids.setdefault(chain.id, len(entity_ids) + 1)
            asym = quote_value(chain.id)
            for residue in chain:
                group = "ATOM" if residue.is_polymer else "HETATM"
                comp = quote_value(residue.name)
                ins = residue.insertion_code or "?"
                for atom in residue:
                    name = quote_value(atom.name)
                    p = atom.pos
                    self.fh.write(
                        f"{group} {atom_id} {atom.element.symbol} {name} . {comp} {asym} "
                        f"{entity_id} {residue.id} {ins} {p.x:.3f} {p.y:.3f} {p.z:.3f} "
                        f"1.00 0.00 {residue.id} {comp} {asym} {name}\n"
                    )
                    self.index_to_id[flat] = atom_id
                    atom_id += 1
                    flat += 1
        self.fh.write("#\n")

    def write_connections(self, topology: Topology) -> None:
        if topology.bond_count == 0:
            return
        columns = ["id", "conn_type_id"]
        columns += [f"ptnr1_{c}" for c in _PARTNER_COLUMNS]
        columns += [f"ptnr2_{c}" for c in _PARTNER_COLUMNS]
        columns += ["pdbx_dist_value", "pdbx_value_order"]
        _write_loop_header(self.fh, "struct_conn", columns)

        context = list(topology.structure.iter_atoms_with_context())
        for n, bond in enumerate(topology.bonds, start=1):
            for idx in bond.pair:
                if idx not in self.index_to_id:
                    raise WriterError("mmCIF", f"bond references atom index {idx} that was not written")
            c1, r1, a1 = context[bond.a1_idx]
            c2, r2, a2 = context[bond.a2_idx]
            self.fh.write(
                f"conn_{n:04d} covale "
                f"{self._partner(c1.id, r1, a1.name)} "
                f"{self._partner(c2.id, r2, a2.name)} "
                f"{a1.distance(a2):.3f} {bond.order.mmcif_token}\n"
            )
        self.fh.write("#\n")

    @staticmethod
    def _partner(chain_id: str, residue, atom_name: str) -> str:
        asym = quote_value(chain_id)
        comp = quote_value(residue.name)
        ins = residue.insertion_code or "?"
        return (
            f"{quote_value(atom_name)} . {comp} {asym} {residue.id} {ins} 1_555 "
            f"{asym} {comp} {residue.id}"
        )


def write_mmcif(obj: Union[Structure, Topology], fh: TextIO) -> None:
    """Write a structure, or a topology including ``_struct_conn``, to ``fh``."""
    topology = obj if isinstance(obj, Topology) else None
    structure = topology.structure if topology is not None else obj

    writer = _CIFWriter(fh)
    writer.write_header()
    writer.write_cell(structure.box_vectors)
    writer.write_atoms(structure)
    if topology is not None:
        writer.write_connections(topology)


def save_mmcif(obj: Union[Structure, Topology], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as fh:
        write_mmcif(obj, fh)
    logger.debug("Wrote mmCIF %s", path)
