"""Standard residue connectivity: amino acids, nucleotides and water (HOH, DOD).

Bonds use a compact notation, one token per bond::

    "CA-CB"   single
    "C=O"     double
    "CG:CD1"  aromatic

Hydrogens are listed per anchor atom as ``(anchor, "H1 H2 ...")``. Atom
names follow the wwPDB (v3) conventions; protonation variants use the Amber
residue names (ASH, GLH, HID, HIE, HIP, LYN, CYX, CYM).

Terminal-only atoms (OXT, H1/H2/H3, HXT, HO5', HO3') are not part of any
template; topology inference bonds them from the residue's terminal position.
"""

from __future__ import annotations

from typing import Iterable

from moltopo.model.types import RESIDUE_ALIASES, BondOrder, StandardResidue
from moltopo.templates.registry import HydrogenSpec, ResidueTemplate, TemplateBond

_SEPARATORS = {
    "-": BondOrder.SINGLE,
    "=": BondOrder.DOUBLE,
    "#": BondOrder.TRIPLE,
    ":": BondOrder.AROMATIC,
}


def parse_bonds(text: str) -> tuple[TemplateBond, ...]:
    """``"N-CA C=O"`` -> ``(("N", "CA", SINGLE), ("C", "O", DOUBLE))``."""
    bonds = []
    for token in text.split():
        for sep, order in _SEPARATORS.items():
            if sep in token:
                a1, a2 = token.split(sep)
                bonds.append((a1, a2, order))
                break
        else:
            raise ValueError(f"Bond token without separator: {token!r}")
    return tuple(bonds)


def parse_hydrogens(groups: Iterable[tuple[str, str]]) -> tuple[HydrogenSpec, ...]:
    out = []
    for anchor, names in groups:
        for name in names.split():
            out.append(HydrogenSpec(name=name, anchors=(anchor,)))
    return tuple(out)


# ======================================================================
# Amino acids
# ======================================================================

_BACKBONE_ATOMS = ("N", "CA", "C", "O")
_BACKBONE_BONDS = "N-CA CA-C C=O"


def _amino(
    name: str,
    side_atoms: str,
    side_bonds: str,
    hydrogens: list[tuple[str, str]],
    standard: str = "",
    charge: int = 0,
    backbone_h: bool = True,
) -> ResidueTemplate:
    h_groups: list[tuple[str, str]] = []
    if backbone_h:
        h_groups.append(("N", "H"))
    h_groups.extend(hydrogens)
    return ResidueTemplate(
        name=name,
        standard_name=StandardResidue(standard or name),
        charge=charge,
        heavy_atoms=_BACKBONE_ATOMS + tuple(side_atoms.split()),
        bonds=parse_bonds(f"{_BACKBONE_BONDS} {side_bonds}"),
        hydrogens=parse_hydrogens(h_groups),
    )


_PHE_RING = "CB-CG CG:CD1 CG:CD2 CD1:CE1 CD2:CE2 CE1:CZ CE2:CZ"
_HIS_RING = "CB-CG CG:ND1 CG:CD2 ND1:CE1 CD2:NE2 CE1:NE2"
_HIS_ATOMS = "CB CG ND1 CD2 CE1 NE2"


def _his(name: str, ring_h: str, charge: int = 0) -> ResidueTemplate:
    groups = [("CA", "HA"), ("CB", "HB2 HB3"), ("CD2", "HD2"), ("CE1", "HE1")]
    if "HD1" in ring_h:
        groups.append(("ND1", "HD1"))
    if "HE2" in ring_h:
        groups.append(("NE2", "HE2"))
    return _amino(name, _HIS_ATOMS, f"CA-CB {_HIS_RING}", groups, standard="HIS", charge=charge)


def _amino_acids() -> list[ResidueTemplate]:
    return [
        _amino("ALA", "CB", "CA-CB", [("CA", "HA"), ("CB", "HB1 HB2 HB3")]),
        _amino(
            "ARG", "CB CG CD NE CZ NH1 NH2",
            "CA-CB CB-CG CG-CD CD-NE NE-CZ CZ=NH1 CZ-NH2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3"), ("CD", "HD2 HD3"),
             ("NE", "HE"), ("NH1", "HH11 HH12"), ("NH2", "HH21 HH22")],
            charge=1,
        ),
        _amino(
            "ASN", "CB CG OD1 ND2", "CA-CB CB-CG CG=OD1 CG-ND2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("ND2", "HD21 HD22")],
        ),
        _amino(
            "ASP", "CB CG OD1 OD2", "CA-CB CB-CG CG=OD1 CG-OD2",
            [("CA", "HA"), ("CB", "HB2 HB3")],
            charge=-1,
        ),
        _amino(
            "ASH", "CB CG OD1 OD2", "CA-CB CB-CG CG=OD1 CG-OD2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("OD2", "HD2")],
            standard="ASP",
        ),
        _amino(
            "CYS", "CB SG", "CA-CB CB-SG",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("SG", "HG")],
        ),
        _amino(
            "CYX", "CB SG", "CA-CB CB-SG",
            [("CA", "HA"), ("CB", "HB2 HB3")],
            standard="CYS",
        ),
        _amino(
            "CYM", "CB SG", "CA-CB CB-SG",
            [("CA", "HA"), ("CB", "HB2 HB3")],
            standard="CYS", charge=-1,
        ),
        _amino(
            "GLN", "CB CG CD OE1 NE2", "CA-CB CB-CG CG-CD CD=OE1 CD-NE2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3"), ("NE2", "HE21 HE22")],
        ),
        _amino(
            "GLU", "CB CG CD OE1 OE2", "CA-CB CB-CG CG-CD CD=OE1 CD-OE2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3")],
            charge=-1,
        ),
        _amino(
            "GLH", "CB CG CD OE1 OE2", "CA-CB CB-CG CG-CD CD=OE1 CD-OE2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3"), ("OE2", "HE2")],
            standard="GLU",
        ),
        _amino("GLY", "", "", [("CA", "HA2 HA3")]),
        _his("HIS", "HD1 HE2"),
        _his("HID", "HD1"),
        _his("HIE", "HE2"),
        _his("HIP", "HD1 HE2", charge=1),
        _amino(
            "ILE", "CB CG1 CG2 CD1", "CA-CB CB-CG1 CB-CG2 CG1-CD1",
            [("CA", "HA"), ("CB", "HB"), ("CG1", "HG12 HG13"),
             ("CG2", "HG21 HG22 HG23"), ("CD1", "HD11 HD12 HD13")],
        ),
        _amino(
            "LEU", "CB CG CD1 CD2", "CA-CB CB-CG CG-CD1 CG-CD2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG"),
             ("CD1", "HD11 HD12 HD13"), ("CD2", "HD21 HD22 HD23")],
        ),
        _amino(
            "LYS", "CB CG CD CE NZ", "CA-CB CB-CG CG-CD CD-CE CE-NZ",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3"), ("CD", "HD2 HD3"),
             ("CE", "HE2 HE3"), ("NZ", "HZ1 HZ2 HZ3")],
            charge=1,
        ),
        _amino(
            "LYN", "CB CG CD CE NZ", "CA-CB CB-CG CG-CD CD-CE CE-NZ",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3"), ("CD", "HD2 HD3"),
             ("CE", "HE2 HE3"), ("NZ", "HZ2 HZ3")],
            standard="LYS",
        ),
        _amino(
            "MET", "CB CG SD CE", "CA-CB CB-CG CG-SD SD-CE",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3"), ("CE", "HE1 HE2 HE3")],
        ),
        _amino(
            "PHE", "CB CG CD1 CD2 CE1 CE2 CZ", f"CA-CB {_PHE_RING}",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CD1", "HD1"), ("CD2", "HD2"),
             ("CE1", "HE1"), ("CE2", "HE2"), ("CZ", "HZ")],
        ),
        _amino(
            "PRO", "CB CG CD", "CA-CB CB-CG CG-CD CD-N",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CG", "HG2 HG3"), ("CD", "HD2 HD3")],
            backbone_h=False,
        ),
        _amino(
            "SER", "CB OG", "CA-CB CB-OG",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("OG", "HG")],
        ),
        _amino(
            "THR", "CB OG1 CG2", "CA-CB CB-OG1 CB-CG2",
            [("CA", "HA"), ("CB", "HB"), ("OG1", "HG1"), ("CG2", "HG21 HG22 HG23")],
        ),
        _amino(
            "TRP", "CB CG CD1 CD2 NE1 CE2 CE3 CZ2 CZ3 CH2",
            "CA-CB CB-CG CG:CD1 CG:CD2 CD1:NE1 NE1:CE2 CD2:CE2 CD2:CE3 "
            "CE2:CZ2 CE3:CZ3 CZ2:CH2 CZ3:CH2",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CD1", "HD1"), ("NE1", "HE1"),
             ("CE3", "HE3"), ("CZ2", "HZ2"), ("CZ3", "HZ3"), ("CH2", "HH2")],
        ),
        _amino(
            "TYR", "CB CG CD1 CD2 CE1 CE2 CZ OH", f"CA-CB {_PHE_RING} CZ-OH",
            [("CA", "HA"), ("CB", "HB2 HB3"), ("CD1", "HD1"), ("CD2", "HD2"),
             ("CE1", "HE1"), ("CE2", "HE2"), ("OH", "HH")],
        ),
        _amino(
            "VAL", "CB CG1 CG2", "CA-CB CB-CG1 CB-CG2",
            [("CA", "HA"), ("CB", "HB"), ("CG1", "HG11 HG12 HG13"), ("CG2", "HG21 HG22 HG23")],
        ),
    ]


# ======================================================================
# Nucleotides
# ======================================================================

_PHOSPHATE_ATOMS = "P OP1 OP2 O5' C5' C4' O4' C3' O3' C2' C1'"
_PHOSPHATE_BONDS = "P=OP1 P-OP2 P-O5' O5'-C5' C5'-C4' C4'-O4' C4'-C3' C3'-O3' C3'-C2' C2'-C1' C1'-O4'"
_SUGAR_H = [("C5'", "H5' H5''"), ("C4'", "H4'"), ("C3'", "H3'"), ("C1'", "H1'")]

# -- bases --------------------------------------------------------------

_PURINE_RING = "C1'-N9 N9:C8 C8:N7 N7:C5 C5:C6 C6:N1 N1:C2 C2:N3 N3:C4 C4:C5 C4:N9"
_PYRIMIDINE_RING = "C1'-N1 N1:C2 C2:N3 N3:C4 C4:C5 C5:C6 C6:N1"

_BASES: dict[str, tuple[str, str, list[tuple[str, str]]]] = {
    "A": (
        "N9 C8 N7 C5 C6 N6 N1 C2 N3 C4",
        f"{_PURINE_RING} C6-N6",
        [("C8", "H8"), ("N6", "H61 H62"), ("C2", "H2")],
    ),
    "G": (
        "N9 C8 N7 C5 C6 O6 N1 C2 N2 N3 C4",
        f"{_PURINE_RING} C6=O6 C2-N2",
        [("C8", "H8"), ("N1", "H1"), ("N2", "H21 H22")],
    ),
    "I": (
        "N9 C8 N7 C5 C6 O6 N1 C2 N3 C4",
        f"{_PURINE_RING} C6=O6",
        [("C8", "H8"), ("N1", "H1"), ("C2", "H2")],
    ),
    "C": (
        "N1 C2 O2 N3 C4 N4 C5 C6",
        f"{_PYRIMIDINE_RING} C2=O2 C4-N4",
        [("N4", "H41 H42"), ("C5", "H5"), ("C6", "H6")],
    ),
    "U": (
        "N1 C2 O2 N3 C4 O4 C5 C6",
        f"{_PYRIMIDINE_RING} C2=O2 C4=O4",
        [("N3", "H3"), ("C5", "H5"), ("C6", "H6")],
    ),
    "T": (
        "N1 C2 O2 N3 C4 O4 C5 C7 C6",
        f"{_PYRIMIDINE_RING} C2=O2 C4=O4 C5-C7",
        [("N3", "H3"), ("C7", "H71 H72 H73"), ("C6", "H6")],
    ),
}


def _nucleotide(name: str, base: str, rna: bool) -> ResidueTemplate:
    base_atoms, base_bonds, base_h = _BASES[base]
    atoms = _PHOSPHATE_ATOMS
    bonds = f"{_PHOSPHATE_BONDS} {base_bonds}"
    sugar_h = list(_SUGAR_H)
    if rna:
        atoms += " O2'"
        bonds += " C2'-O2'"
        sugar_h += [("C2'", "H2'"), ("O2'", "HO2'")]
    else:
        sugar_h += [("C2'", "H2' H2''")]
    return ResidueTemplate(
        name=name,
        standard_name=StandardResidue(name),
        charge=-1,
        heavy_atoms=tuple(f"{atoms} {base_atoms}".split()),
        bonds=parse_bonds(bonds),
        hydrogens=parse_hydrogens(sugar_h + base_h),
    )


def _nucleotides() -> list[ResidueTemplate]:
    rna = [_nucleotide(b, b, rna=True) for b in ("A", "C", "G", "U", "I")]
    dna = [_nucleotide(f"D{b}", b, rna=False) for b in ("A", "C", "G", "T", "I")]
    return rna + dna


# ======================================================================
# Solvent
# ======================================================================

def _water(name: str = "HOH", hydrogens: str = "H1 H2") -> ResidueTemplate:
    return ResidueTemplate(
        name=name,
        standard_name=StandardResidue.HOH,
        heavy_atoms=("O",),
        hydrogens=parse_hydrogens([("O", hydrogens)]),
    )


def build_standard_templates() -> list[ResidueTemplate]:
    return _amino_acids() + _nucleotides() + [_water(), _water("DOD", "D1 D2")]


# CHARMM histidine names map onto the matching protonation state, not plain HIS.
_CHARMM_HISTIDINES = {"HSD": "HID", "HSE": "HIE", "HSP": "HIP"}


def standard_aliases(template_names: Iterable[str]) -> dict[str, str]:
    """Registry aliases for every residue synonym without a template of its own.

    Derived from ``RESIDUE_ALIASES`` so that each name classified as a
    standard residue or water resolves to a built-in template.
    """
    names = set(template_names)
    aliases = {
        alias: target for alias, target in RESIDUE_ALIASES.items()
        if alias not in names
    }
    for alias, target in _CHARMM_HISTIDINES.items():
        if target in names:
            aliases[alias] = target
    return aliases


STANDARD_ALIASES: dict[str, str] = standard_aliases(t.name for t in build_standard_templates())
