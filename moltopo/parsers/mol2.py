"""Tripos MOL2 reader for user residue templates.

Only the atom names and bond table matter for topology inference; the
coordinates in the file are ignored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional

from moltopo.core.errors import ParseError, TemplateError
from moltopo.core.logging_utils import get_logger
from moltopo.model.template import Template
from moltopo.model.types import BondOrder
from moltopo.parsers.base import read_lines

logger = get_logger(__name__)

TEMPLATE_EXTENSIONS = (".mol2", ".json")


class Mol2TemplateParser:
    """Parse ``.mol2`` files into ``Template`` objects (one per molecule)."""

    def parse(self, path: Path) -> list[Template]:
        path = Path(path)
        return self.parse_lines(read_lines(path), source=str(path))

    def parse_text(self, text: str) -> list[Template]:
        return self.parse_lines(text.splitlines(), source=None)

    def parse_lines(self, lines: list[str], source: Optional[str] = None) -> list[Template]:
        templates: list[Template] = []
        section = ""
        mol_name = ""
        atoms: dict[str, str] = {}
        atom_order: list[str] = []
        subst_name = ""
        bonds: list[tuple[str, str, BondOrder]] = []
        mol_line = 0

        def finish() -> None:
            if not atom_order:
                return
            name = subst_name or mol_name
            if not name:
                raise ParseError("mol2", "molecule without a name", source)
            try:
                templates.append(Template(name, atom_order, bonds))
            except TemplateError as e:
                raise ParseError("mol2", str(e), source) from e

        for raw in lines:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("@<TRIPOS>"):
                section = line[len("@<TRIPOS>"):].upper()
                if section == "MOLECULE":
                    finish()
                    mol_name, subst_name = "", ""
                    atoms, atom_order, bonds = {}, [], []
                    mol_line = 0
                continue

            if section == "MOLECULE":
                if mol_line == 0:
                    mol_name = line.split()[0]
                mol_line += 1

            elif section == "ATOM":
                parts = line.split()
                if len(parts) < 6:
                    raise ParseError("mol2", f"short ATOM line: {line!r}", source)
                atom_id, atom_name = parts[0], parts[1]
                if atom_name in atom_order:
                    raise ParseError("mol2", f"duplicate atom name '{atom_name}'", source)
                atoms[atom_id] = atom_name
                atom_order.append(atom_name)
                if len(parts) >= 8 and not subst_name:
                    subst_name = parts[7]

            elif section == "BOND":
                parts = line.split()
                if len(parts) < 4:
                    raise ParseError("mol2", f"short BOND line: {line!r}", source)
                try:
                    a1, a2 = atoms[parts[1]], atoms[parts[2]]
                except KeyError as e:
                    raise ParseError("mol2", f"bond references unknown atom id {e}", source) from None
                bonds.append((a1, a2, _bond_order(parts[3])))

        finish()
        if not templates:
            raise ParseError("mol2", "no molecules found", source)
        return templates


def _bond_order(token: str) -> BondOrder:
    try:
        return BondOrder.parse(token)
    except ValueError:
        logger.debug("Unknown MOL2 bond type %r; treating as single", token)
        return BondOrder.SINGLE


def load_template_file(path: Path) -> list[Template]:
    """Templates from one ``.mol2`` or ``.json`` file.

    A JSON file holds one template object or a list of them.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".mol2":
        return Mol2TemplateParser().parse(path)
    if suffix == ".json":
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ParseError("json", str(e), str(path)) from e
        items = data if isinstance(data, list) else [data]
        return [Template.from_dict(d) for d in items]
    raise ParseError("template", f"unsupported template extension '{path.suffix}'", str(path))


def load_templates(paths: Iterable[Path]) -> list[Template]:
    """Templates from files and/or directories (scanned for .mol2/.json)."""
    templates: list[Template] = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            files = sorted(f for f in p.iterdir() if f.suffix.lower() in TEMPLATE_EXTENSIONS)
        else:
            files = [p]
        for f in files:
            loaded = load_template_file(f)
            logger.debug("Loaded %d template(s) from %s", len(loaded), f)
            templates.extend(loaded)
    return templates
