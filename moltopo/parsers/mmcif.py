"""mmCIF reader: ``_atom_site`` loop into a ``Structure``.

Reads the first data block only. Author chain/residue/atom labels are
preferred over label_* ones so residue ids match the PDB numbering. Only
the first model (``pdbx_PDB_model_num``) is kept; ``_cell`` becomes the
periodic box.
"""

from __future__ import annotations

import re
from typing import Optional

from moltopo.core.errors import ParseError
from moltopo.core.logging_utils import get_logger
from moltopo.model.geometry import box_vectors_from_cell
from moltopo.model.structure import Structure
from moltopo.parsers.base import AtomRecord, StructureAssembler, StructureParser

logger = get_logger(__name__)

_TOKEN_RE = re.compile(r"'(?:[^']|'(?=\S))*'|\"(?:[^\"]|\"(?=\S))*\"|[^\s]+")


# ======================================================================
# Low-level mmCIF tokenizer
# ======================================================================

def _unwrap_value(s: str) -> str:
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        return s[1:-1]
    if s in (".", "?"):
        return ""
    return s


class CIFBlock:
    """Key/value items and loops of one mmCIF data block."""

    def __init__(self):
        self.items: dict[str, str] = {}
        self.loops: dict[str, dict[str, list[str]]] = {}

    def get(self, key: str) -> Optional[str]:
        """Single item ``_cat.attr`` (looked up case-insensitively)."""
        value = self.items.get(key.lower())
        if value is None:
            return None
        return _unwrap_value(value) or None

    def loop(self, category: str) -> dict[str, list[str]]:
        """Columns of a loop category, keyed by lower-cased attribute name."""
        return self.loops.get(category.lower(), {})


def tokenize_mmcif(lines: list[str]) -> CIFBlock:
    """Tokenize the first data block.

    Handles quoted values, ``;``-delimited text fields and item values
    continued on the following line.
    """
    block = CIFBlock()
    started = False
    loop_cat: Optional[str] = None
    loop_cols: list[str] = []
    loop_vals: list[str] = []
    pending_key: Optional[str] = None
    text_buf: Optional[list[str]] = None

    def flush() -> None:
        nonlocal loop_cat, loop_cols, loop_vals
        if loop_cat is not None and loop_cols:
            ncol = len(loop_cols)
            if len(loop_vals) % ncol:
                logger.debug("Loop %s has a ragged last row; truncating", loop_cat)
            nrow = len(loop_vals) // ncol
            table = block.loops.setdefault(loop_cat, {})
            for i, col in enumerate(loop_cols):
                table[col] = [loop_vals[r * ncol + i] for r in range(nrow)]
        loop_cat, loop_cols, loop_vals = None, [], []

    def emit(value: str) -> None:
        nonlocal pending_key
        if pending_key is not None:
            block.items[pending_key] = value
            pending_key = None
        elif loop_cat is not None:
            loop_vals.append(value)

    for raw in lines:
        line = raw.rstrip("\r\n")

        if text_buf is not None:
            if line.startswith(";"):
                emit("'" + "\n".join(text_buf).strip() + "'")
                text_buf = None
            else:
                text_buf.append(line)
            continue
        if line.startswith(";"):
            text_buf = [line[1:]]
            continue

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("data_"):
            if started:
                break
            started = True
            continue
        if stripped.startswith("loop_"):
            flush()
            loop_cat = ""
            continue

        if pending_key is not None and not stripped.startswith("_"):
            tokens = _TOKEN_RE.findall(stripped)
            if tokens:
                emit(tokens[0])
            continue
        pending_key = None

        if loop_cat is not None:
            if stripped.startswith("_") and not loop_vals:
                name = stripped.split()[0][1:]
                cat, _, attr = name.partition(".")
                loop_cat = cat.lower()
                loop_cols.append(attr.lower())
                continue
            if stripped.startswith("_"):
                flush()
            else:
                loop_vals.extend(_TOKEN_RE.findall(stripped))
                continue

        if stripped.startswith("_"):
            parts = stripped.split(None, 1)
            key = parts[0][1:].lower()
            if len(parts) == 2:
                block.items[key] = parts[1].strip()
            else:
                pending_key = key

    flush()
    return block


def _opt_float(s: Optional[str]) -> Optional[float]:
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


# ======================================================================
# CIFParser
# ======================================================================

class CIFParser(StructureParser):
    """Parse mmCIF files (.cif, .cif.gz, .mmcif)."""

    format_name = "mmcif"

    def parse_lines(self, lines: list[str], source: Optional[str] = None) -> Structure:
        block = tokenize_mmcif(lines)
        site = block.loop("atom_site")
        if not site:
            raise ParseError("mmcif", "no _atom_site loop found", source)

        def column(*names: str) -> list[str]:
            for n in (name.lower() for name in names):
                if n in site:
                    return [_unwrap_value(v) for v in site[n]]
            return []

        xs = column("Cartn_x")
        ys = column("Cartn_y")
        zs = column("Cartn_z")
        chains = column("auth_asym_id", "label_asym_id")
        comps = column("auth_comp_id", "label_comp_id")
        seqs = column("auth_seq_id", "label_seq_id")
        atoms = column("auth_atom_id", "label_atom_id")
        elements = column("type_symbol")
        groups = column("group_PDB")
        ins_codes = column("pdbx_PDB_ins_code")
        alt_ids = column("label_alt_id")
        models = column("pdbx_PDB_model_num")

        def at(col: list[str], i: int, default: str = "") -> str:
            return col[i] if i < len(col) else default

        asm = StructureAssembler()
        first_model: Optional[str] = None
        skipped = 0
        for i in range(len(xs)):
            model = at(models, i)
            if first_model is None:
                first_model = model
            elif model != first_model:
                break
            try:
                record = AtomRecord(
                    chain_id=at(chains, i),
                    res_name=at(comps, i),
                    res_seq=int(at(seqs, i)),
                    atom_name=at(atoms, i),
                    x=float(xs[i]),
                    y=float(at(ys, i)),
                    z=float(at(zs, i)),
                    element=at(elements, i),
                    ins_code=at(ins_codes, i),
                    alt_loc=at(alt_ids, i),
                    hetatm=at(groups, i) == "HETATM",
                )
            except (ValueError, IndexError):
                skipped += 1
                logger.debug("Skipping malformed _atom_site row %d", i)
                continue
            asm.add(record)

        cell = [_opt_float(block.get(f"cell.{k}")) for k in (
            "length_a", "length_b", "length_c", "angle_alpha", "angle_beta", "angle_gamma",
        )]
        if all(v is not None for v in cell):
            asm.box_vectors = box_vectors_from_cell(*cell)

        if asm.atom_count == 0:
            raise ParseError("mmcif", "no usable _atom_site rows", source)
        if skipped:
            logger.warning("Skipped %d malformed _atom_site rows in %s", skipped, source or "<text>")
        return asm.build()

    @staticmethod
    def extensions() -> list[str]:
        return [".cif", ".cif.gz", ".mmcif"]
