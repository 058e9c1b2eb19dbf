"""PDB format reader: fixed-column ATOM/HETATM records into a ``Structure``.

Only the first MODEL is read. CRYST1 becomes the periodic box.
"""

from __future__ import annotations

from typing import Optional

from moltopo.core.errors import ParseError
from moltopo.core.logging_utils import get_logger
from moltopo.model.geometry import box_vectors_from_cell
from moltopo.model.structure import Structure
from moltopo.parsers.base import AtomRecord, StructureAssembler, StructureParser

logger = get_logger(__name__)


def parse_atom_line(line: str) -> AtomRecord:
    """One ATOM/HETATM line; raises ``ValueError``/``IndexError`` when malformed."""
    return AtomRecord(
        chain_id=line[21].strip() if len(line) > 21 else "",
        res_name=line[17:20].strip(),
        res_seq=int(line[22:26]),
        atom_name=line[12:16].strip(),
        x=float(line[30:38]),
        y=float(line[38:46]),
        z=float(line[46:54]),
        element=line[76:78].strip() if len(line) > 77 else "",
        ins_code=line[26].strip() if len(line) > 26 else "",
        alt_loc=line[16].strip(),
        hetatm=line.startswith("HETATM"),
    )


class PDBFormatParser(StructureParser):
    """Parse PDB-format files (.pdb, .ent, .ent.gz)."""

    format_name = "pdb"

    def parse_lines(self, lines: list[str], source: Optional[str] = None) -> Structure:
        asm = StructureAssembler()
        skipped = 0
        model_seen = False

        for line in lines:
            rec = line[:6].strip()

            if rec == "MODEL":
                if model_seen:
                    break
                model_seen = True

            elif rec == "ENDMDL":
                break

            elif rec == "CRYST1":
                try:
                    asm.box_vectors = box_vectors_from_cell(
                        float(line[6:15]), float(line[15:24]), float(line[24:33]),
                        float(line[33:40]), float(line[40:47]), float(line[47:54]),
                    )
                except (ValueError, IndexError):
                    logger.debug("Ignoring malformed CRYST1 record: %r", line.rstrip())

            elif rec in ("ATOM", "HETATM"):
                try:
                    record = parse_atom_line(line)
                except (ValueError, IndexError):
                    skipped += 1
                    logger.debug("Skipping malformed %s line: %r", rec, line.rstrip())
                    continue
                asm.add(record)

        if asm.atom_count == 0:
            raise ParseError("pdb", "no ATOM/HETATM records found", source)
        if skipped:
            logger.warning("Skipped %d malformed coordinate lines in %s", skipped, source or "<text>")
        return asm.build()

    @staticmethod
    def extensions() -> list[str]:
        return [".pdb", ".ent", ".pdb.gz", ".ent.gz"]
