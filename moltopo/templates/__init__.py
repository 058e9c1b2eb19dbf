"""Residue template registry (built-in standard residues)."""

from moltopo.templates.registry import (
    HydrogenSpec,
    ResidueTemplate,
    TemplateRegistry,
    default_registry,
)

__all__ = [
    "HydrogenSpec",
    "ResidueTemplate",
    "TemplateRegistry",
    "default_registry",
]
