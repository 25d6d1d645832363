"""
In-Memory Commitment Tree

A local model of the shield contract's Merkle tree. It follows the contract's
update rule: inserting a leaf stores the truncated commitment, then every
ancestor is recomputed from its two children, so untouched nodes stay zero.
The untruncated digest of the top level is kept as the latest root.

MemoryTree satisfies the TreeAccessor protocol and is used for local path
computation, tests, and the CLI's --tree-file mode.
"""

import json
import logging
from typing import Dict, Iterable, Optional

from ..codec.hex_helpers import ensure0x, require_hex, truncate_hex
from ..config import TreeConfig
from ..exceptions import LengthMismatchError, ValidationError
from ..hashing import concatenate_then_hash
from .path import get_leaf_index_from_z_count

logger = logging.getLogger(__name__)


class MemoryTree:
    """
    Sparse array-indexed Merkle tree.

    Nodes that were never written read as zero bytes of the node length,
    matching unset contract storage.
    """

    def __init__(self, config: TreeConfig):
        self.config = config
        self._nodes: Dict[int, str] = {}
        self._root = ensure0x("00" * config.inputs_hash_length)
        self._leaf_count = 0

    @property
    def leaf_count(self) -> int:
        return self._leaf_count

    @property
    def zero_node(self) -> str:
        return ensure0x("00" * self.config.merkle_hash_length)

    def get_node(self, index: int) -> str:
        """Return the node at an array index (zero if never written)."""
        if index < 0 or index >= 2 * self.config.leaf_count - 1:
            raise ValidationError(f"Node index {index} is outside a depth-{self.config.merkle_depth} tree")
        return self._nodes.get(index, self.zero_node)

    def get_root(self) -> str:
        """Return the latest untruncated root."""
        return self._root

    def insert_leaf(self, commitment: str) -> int:
        """
        Append a commitment at the next z-count and update its ancestors.

        Args:
            commitment: '0x'-prefixed commitment of inputs_hash_length bytes

        Returns:
            The z-count the commitment was inserted at

        Raises:
            LengthMismatchError: If the commitment has the wrong length
            ValidationError: If the tree is full or the commitment is not hex
        """
        digits = require_hex(commitment)
        if len(digits) != self.config.inputs_hash_length * 2:
            raise LengthMismatchError(
                f"Commitment has incorrect length: {ensure0x(digits)} "
                f"(expected {self.config.inputs_hash_length} bytes)"
            )

        z_count = self._leaf_count
        index = get_leaf_index_from_z_count(z_count, self.config.merkle_depth)
        self._nodes[index] = truncate_hex(digits, self.config.merkle_hash_length)

        while index > 0:
            parent = (index - 1) // 2
            left = self.get_node(2 * parent + 1)
            right = self.get_node(2 * parent + 2)
            digest = concatenate_then_hash(left, right)
            self._nodes[parent] = truncate_hex(digest, self.config.merkle_hash_length)
            if parent == 0:
                self._root = digest
            index = parent

        self._leaf_count += 1
        logger.debug(f"Inserted commitment {ensure0x(digits)} at z-count {z_count}, root now {self._root}")
        return z_count

    def insert_leaves(self, commitments: Iterable[str]) -> None:
        for commitment in commitments:
            self.insert_leaf(commitment)

    @classmethod
    def from_leaves(cls, commitments: Iterable[str], config: TreeConfig) -> "MemoryTree":
        """Build a tree by inserting commitments in order."""
        tree = cls(config)
        tree.insert_leaves(commitments)
        return tree

    @classmethod
    def from_file(cls, tree_file: str, config: Optional[TreeConfig] = None) -> "MemoryTree":
        """
        Load a tree from a JSON file.

        The file holds either a list of commitments or an object with a
        "leaves" list and an optional "depth" that overrides the configured
        tree depth.
        """
        with open(tree_file, "r") as f:
            data = json.load(f)

        config = config or TreeConfig()
        if isinstance(data, dict):
            leaves = data.get("leaves", [])
            if "depth" in data:
                config = TreeConfig(
                    merkle_depth=int(data["depth"]),
                    merkle_hash_length=config.merkle_hash_length,
                    inputs_hash_length=config.inputs_hash_length,
                    packing_size=config.packing_size,
                    fetch_workers=config.fetch_workers,
                )
        elif isinstance(data, list):
            leaves = data
        else:
            raise ValidationError(f"Tree file {tree_file} must hold a list of leaves or an object with 'leaves'")

        logger.info(f"Loading {len(leaves)} leaves from {tree_file} into a depth-{config.merkle_depth} tree")
        return cls.from_leaves(leaves, config)
