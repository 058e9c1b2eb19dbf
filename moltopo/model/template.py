from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from moltopo.core.errors import TemplateError
from moltopo.model.types import BondOrder

TemplateBond = tuple[str, str, BondOrder]


@dataclass(frozen=True)
class Template:
    """User-authored residue template (atom names plus named bonds).

    Used for hetero residues; bonds may only reference declared atom names.
    """

    name: str
    atom_names: tuple[str, ...]
    bonds: tuple[TemplateBond, ...]

    def __init__(
        self,
        name: str,
        atom_names: Iterable[str],
        bonds: Iterable[tuple[str, str, Union[BondOrder, str]]] = (),
    ):
        atoms = tuple(atom_names)
        if len(set(atoms)) != len(atoms):
            raise TemplateError(f"Template '{name}' declares an atom name twice")
        declared = set(atoms)
        norm: list[TemplateBond] = []
        for a1, a2, order in bonds:
            for n in (a1, a2):
                if n not in declared:
                    raise TemplateError(
                        f"Bond in template '{name}' refers to undeclared atom '{n}'"
                    )
            if not isinstance(order, BondOrder):
                order = BondOrder.parse(order)
            norm.append((a1, a2, order))
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "atom_names", atoms)
        object.__setattr__(self, "bonds", tuple(norm))

    def has_atom(self, name: str) -> bool:
        return name in self.atom_names

    def has_bond(self, name1: str, name2: str) -> bool:
        return any(
            (a1 == name1 and a2 == name2) or (a1 == name2 and a2 == name1)
            for a1, a2, _ in self.bonds
        )

    @property
    def atom_count(self) -> int:
        return len(self.atom_names)

    @property
    def bond_count(self) -> int:
        return len(self.bonds)

    @classmethod
    def from_dict(cls, data: dict) -> "Template":
        """Build from ``{"name", "atoms": [...], "bonds": [[a1, a2, order], ...]}``."""
        try:
            return cls(
                name=data["name"],
                atom_names=data["atoms"],
                bonds=[tuple(b) if len(b) == 3 else (b[0], b[1], "single") for b in data.get("bonds", [])],
            )
        except KeyError as e:
            raise TemplateError(f"Template definition missing key {e}") from None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "atoms": list(self.atom_names),
            "bonds": [[a1, a2, order.value] for a1, a2, order in self.bonds],
        }

    def __str__(self) -> str:
        return (
            f'Template {{ name: "{self.name}", atoms: {self.atom_count}, '
            f"bonds: {self.bond_count} }}"
        )
