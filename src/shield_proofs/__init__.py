"""
Shield Proofs

Witness preparation for the shield contract's zero-knowledge circuits:
numeric codecs and field packing, single-round SHA-256 folding, witness
vector encoding, and sister-path resolution and root checking for the
array-indexed commitment tree.
"""

__version__ = "0.1.0"

from .config import TreeConfig
from .element import Element
from .exceptions import (
    WitnessError,
    ValidationError,
    LengthMismatchError,
    PackingOverflowError,
    ConsistencyError,
    TreeAccessError,
)
from .vectors import compute_vectors, encode_element
from .merkle import MemoryTree, MerklePathResult, check_root, compute_path

__all__ = [
    "__version__",
    "TreeConfig",
    "Element",
    "WitnessError",
    "ValidationError",
    "LengthMismatchError",
    "PackingOverflowError",
    "ConsistencyError",
    "TreeAccessError",
    "compute_vectors",
    "encode_element",
    "MemoryTree",
    "MerklePathResult",
    "check_root",
    "compute_path",
]
