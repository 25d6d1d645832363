"""
Commitment Tree Operations

This package resolves and verifies sister paths through the shield
contract's array-indexed commitment tree:

- path: leaf index arithmetic and sister-path resolution against a tree accessor
- verify: root recomputation and checking
- tree: an in-memory tree following the contract's update rule
"""

from .path import (
    TreeAccessor,
    Side,
    SisterPathEntry,
    MerklePathResult,
    get_leaf_index_from_z_count,
    get_sister_indices,
    encode_positions,
    compute_path,
    path_from_hashes,
)

from .verify import (
    order_before_concatenation,
    compute_root,
    reconcile_root,
    check_root,
)

from .tree import MemoryTree

__all__ = [
    # Path resolution
    "TreeAccessor",
    "Side",
    "SisterPathEntry",
    "MerklePathResult",
    "get_leaf_index_from_z_count",
    "get_sister_indices",
    "encode_positions",
    "compute_path",
    "path_from_hashes",
    # Verification
    "order_before_concatenation",
    "compute_root",
    "reconcile_root",
    "check_root",
    # In-memory tree
    "MemoryTree",
]
