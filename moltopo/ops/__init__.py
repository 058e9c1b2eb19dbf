"""Operations on structures: topology inference, cleaning, transforms."""

from moltopo.ops.clean import CleanConfig, clean_structure
from moltopo.ops.terminals import is_optional_terminal_atom
from moltopo.ops.topology import TopologyBuilder
from moltopo.ops.transform import Transform

__all__ = [
    "CleanConfig",
    "Transform",
    "TopologyBuilder",
    "clean_structure",
    "is_optional_terminal_atom",
]
