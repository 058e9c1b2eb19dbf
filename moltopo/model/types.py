"""Enumerations shared by the structure model, templates and writers."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Element(Enum):
    """Chemical element with its display symbol and standard atomic mass."""

    H = ("H", 1.008)
    C = ("C", 12.011)
    N = ("N", 14.007)
    O = ("O", 15.999)
    F = ("F", 18.998)
    NA = ("Na", 22.990)
    MG = ("Mg", 24.305)
    P = ("P", 30.974)
    S = ("S", 32.06)
    CL = ("Cl", 35.45)
    K = ("K", 39.098)
    CA = ("Ca", 40.078)
    MN = ("Mn", 54.938)
    FE = ("Fe", 55.845)
    CO = ("Co", 58.933)
    NI = ("Ni", 58.693)
    CU = ("Cu", 63.546)
    ZN = ("Zn", 65.38)
    SE = ("Se", 78.971)
    BR = ("Br", 79.904)
    CD = ("Cd", 112.414)
    I = ("I", 126.904)  # noqa: E741
    HG = ("Hg", 200.592)
    LI = ("Li", 6.94)
    UNKNOWN = ("X", 0.0)

    def __init__(self, symbol: str, atomic_mass: float):
        self.symbol = symbol
        self.atomic_mass = atomic_mass

    @classmethod
    def from_symbol(cls, symbol: str) -> "Element":
        key = symbol.strip().upper()
        if key == "D":
            return cls.H
        for el in cls:
            if el.symbol.upper() == key and el is not cls.UNKNOWN:
                return el
        return cls.UNKNOWN

    @classmethod
    def guess(cls, atom_name: str, res_name: str = "") -> "Element":
        """Best-effort element for records without an element column.

        Single-atom residues named after their element (ZN, MG, CL) keep the
        two-letter symbol; everything else uses the first letter of the name.
        """
        letters = "".join(c for c in atom_name if c.isalpha())
        if not letters:
            return cls.UNKNOWN
        if res_name and letters.upper() == res_name.strip().upper():
            el = cls.from_symbol(letters)
            if el is not cls.UNKNOWN:
                return el
        return cls.from_symbol(letters[0])

    def __str__(self) -> str:
        return self.symbol


class BondOrder(Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    AROMATIC = "aromatic"

    @property
    def mmcif_token(self) -> str:
        return _MMCIF_TOKENS[self]

    @classmethod
    def parse(cls, token: str) -> "BondOrder":
        """Parse names, mmCIF tokens (SING, DOUB, ...) and mol2 types (1, 2, ar, am)."""
        key = str(token).strip().lower()
        try:
            return _BOND_ORDER_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown bond order: {token!r}") from None

    def __str__(self) -> str:
        return self.value.capitalize()


_MMCIF_TOKENS = {
    BondOrder.SINGLE: "SING",
    BondOrder.DOUBLE: "DOUB",
    BondOrder.TRIPLE: "TRIP",
    BondOrder.AROMATIC: "AROM",
}

_BOND_ORDER_ALIASES = {
    "single": BondOrder.SINGLE, "sing": BondOrder.SINGLE, "1": BondOrder.SINGLE,
    "am": BondOrder.SINGLE,
    "double": BondOrder.DOUBLE, "doub": BondOrder.DOUBLE, "2": BondOrder.DOUBLE,
    "triple": BondOrder.TRIPLE, "trip": BondOrder.TRIPLE, "3": BondOrder.TRIPLE,
    "aromatic": BondOrder.AROMATIC, "arom": BondOrder.AROMATIC, "ar": BondOrder.AROMATIC,
}


class ResidueCategory(Enum):
    STANDARD = "Standard Residue"
    HETERO = "Hetero Residue"
    ION = "Ion"
    WATER = "Water"

    def __str__(self) -> str:
        return self.value


class ResiduePosition(Enum):
    NONE = "none"
    N_TERMINAL = "n_terminal"
    C_TERMINAL = "c_terminal"
    INTERNAL = "internal"
    FIVE_PRIME = "five_prime"
    THREE_PRIME = "three_prime"


class PolymerClass(Enum):
    PROTEIN = "protein"
    NUCLEIC = "nucleic"
    SOLVENT = "solvent"


class StandardResidue(Enum):
    """Residues covered by the built-in template set."""

    ALA = "ALA"
    ARG = "ARG"
    ASN = "ASN"
    ASP = "ASP"
    CYS = "CYS"
    GLN = "GLN"
    GLU = "GLU"
    GLY = "GLY"
    HIS = "HIS"
    ILE = "ILE"
    LEU = "LEU"
    LYS = "LYS"
    MET = "MET"
    PHE = "PHE"
    PRO = "PRO"
    SER = "SER"
    THR = "THR"
    TRP = "TRP"
    TYR = "TYR"
    VAL = "VAL"
    A = "A"
    C = "C"
    G = "G"
    U = "U"
    I = "I"  # noqa: E741
    DA = "DA"
    DC = "DC"
    DG = "DG"
    DT = "DT"
    DI = "DI"
    HOH = "HOH"

    @property
    def polymer_class(self) -> PolymerClass:
        if self is StandardResidue.HOH:
            return PolymerClass.SOLVENT
        if self.value in _NUCLEIC:
            return PolymerClass.NUCLEIC
        return PolymerClass.PROTEIN

    @property
    def is_protein(self) -> bool:
        return self.polymer_class is PolymerClass.PROTEIN

    @property
    def is_nucleic(self) -> bool:
        return self.polymer_class is PolymerClass.NUCLEIC

    @property
    def is_water(self) -> bool:
        return self is StandardResidue.HOH

    @classmethod
    def from_name(cls, name: str) -> Optional["StandardResidue"]:
        """Map a residue name (including protonation variants) to its standard residue."""
        key = name.strip().upper()
        key = RESIDUE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


_NUCLEIC = frozenset({"A", "C", "G", "U", "I", "DA", "DC", "DG", "DT", "DI"})

# Protonation states and common synonyms -> canonical standard residue.
RESIDUE_ALIASES: dict[str, str] = {
    "ASH": "ASP",
    "GLH": "GLU",
    "HID": "HIS",
    "HIE": "HIS",
    "HIP": "HIS",
    "HSD": "HIS",
    "HSE": "HIS",
    "HSP": "HIS",
    "LYN": "LYS",
    "CYX": "CYS",
    "CYM": "CYS",
    "WAT": "HOH",
    "H2O": "HOH",
    "DOD": "HOH",
    "SOL": "HOH",
    "TIP3": "HOH",
}
