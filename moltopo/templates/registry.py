"""Built-in residue templates and the read-only registry that serves them.

Usage::

    from moltopo.templates import default_registry

    tmpl = default_registry().get("ALA")
    for a1, a2, order in tmpl.bonds:
        ...

``default_registry()`` builds the standard set once (under a lock) and hands
back the same instance on every later call. Code that needs a different set
(tests, custom force-field naming) constructs its own ``TemplateRegistry``
and passes it to ``TopologyBuilder``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from moltopo.core.errors import TemplateError
from moltopo.core.logging_utils import get_logger
from moltopo.model.types import BondOrder, StandardResidue

logger = get_logger(__name__)

TemplateBond = tuple[str, str, BondOrder]


@dataclass(frozen=True)
class HydrogenSpec:
    """A hydrogen the template allows, with candidate heavy-atom anchors.

    Anchors are kept in declaration order; topology inference bonds the
    hydrogen to the first one.
    """

    name: str
    anchors: tuple[str, ...] = ()

    @property
    def primary_anchor(self) -> Optional[str]:
        return self.anchors[0] if self.anchors else None


@dataclass(frozen=True)
class ResidueTemplate:
    """Canonical connectivity of one standard residue."""

    name: str
    standard_name: StandardResidue
    charge: int = 0
    heavy_atoms: tuple[str, ...] = ()
    bonds: tuple[TemplateBond, ...] = ()
    hydrogens: tuple[HydrogenSpec, ...] = field(default=())

    def __post_init__(self) -> None:
        declared = set(self.heavy_atoms)
        if len(declared) != len(self.heavy_atoms):
            raise TemplateError(f"Residue template '{self.name}' repeats a heavy atom")
        for a1, a2, _ in self.bonds:
            for n in (a1, a2):
                if n not in declared:
                    raise TemplateError(
                        f"Bond in residue template '{self.name}' refers to unknown atom '{n}'"
                    )
        for h in self.hydrogens:
            for anchor in h.anchors:
                if anchor not in declared:
                    raise TemplateError(
                        f"Hydrogen '{h.name}' in '{self.name}' anchored to unknown atom '{anchor}'"
                    )

    @property
    def atom_names(self) -> tuple[str, ...]:
        return self.heavy_atoms + tuple(h.name for h in self.hydrogens)

    def has_atom(self, name: str) -> bool:
        return name in self.heavy_atoms or self.hydrogen(name) is not None

    def hydrogen(self, name: str) -> Optional[HydrogenSpec]:
        for h in self.hydrogens:
            if h.name == name:
                return h
        return None

    @property
    def bond_count(self) -> int:
        return len(self.bonds)

    def __str__(self) -> str:
        return (
            f'ResidueTemplate {{ name: "{self.name}", heavy: {len(self.heavy_atoms)}, '
            f"hydrogens: {len(self.hydrogens)}, bonds: {self.bond_count} }}"
        )


class TemplateRegistry:
    """Read-only lookup from residue name to ``ResidueTemplate``.

    ``aliases`` maps extra names (e.g. ``WAT``) onto a registered template.
    """

    def __init__(
        self,
        templates: Iterable[ResidueTemplate],
        aliases: Optional[dict[str, str]] = None,
    ):
        self._templates: dict[str, ResidueTemplate] = {}
        for t in templates:
            if t.name in self._templates:
                raise TemplateError(f"Residue template '{t.name}' registered twice")
            self._templates[t.name] = t
        self._aliases: dict[str, str] = {}
        for alias, target in (aliases or {}).items():
            if target not in self._templates:
                raise TemplateError(f"Alias '{alias}' points at unknown template '{target}'")
            self._aliases[alias] = target

    def get(self, name: str) -> Optional[ResidueTemplate]:
        key = self._aliases.get(name, name)
        return self._templates.get(key)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[ResidueTemplate]:
        return iter(self._templates.values())

    def names(self) -> list[str]:
        return sorted(self._templates)

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def __repr__(self) -> str:
        return f"<TemplateRegistry templates={len(self)} aliases={len(self._aliases)}>"


_default: Optional[TemplateRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> TemplateRegistry:
    """Process-wide registry of the built-in standard templates."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                from moltopo.templates.standard import STANDARD_ALIASES, build_standard_templates

                templates = build_standard_templates()
                _default = TemplateRegistry(templates, STANDARD_ALIASES)
                logger.debug("Loaded %d built-in residue templates", len(_default))
    return _default
