"""
Merkle Sister-Path Resolution

The shield contract stores its commitment tree as a flat array: a complete
binary tree of merkle_depth levels with the root at index 0 and the children
of node i at 2i+1 and 2i+2. Leaves fill the last level from index
2^(merkle_depth-1) - 1 onwards, in insertion (z-count) order.

To prove a commitment is in the tree the circuit needs its sister path: the
sibling of every node on the way from the leaf up to the root, plus which
side each sibling sits on, since the order of hashing matters.

E.g. for a depth-4 tree, if C is the commitment the X's mark the sister path:

                 root
        ABCD                 X
     X        CD        EF        GH
  A    B    C    X    E    F    G    H
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Protocol, Tuple

from ..codec.conversions import bin_to_hex, hex_to_bin
from ..codec.hex_helpers import ensure0x, left_pad_hex, require_hex, strip0x
from ..config import TreeConfig
from ..exceptions import LengthMismatchError, ValidationError

logger = logging.getLogger(__name__)


class TreeAccessor(Protocol):
    """
    Read access to the array-indexed commitment tree.

    Implementations may talk to a remote node; any transport error they raise
    is propagated to the caller unmodified.
    """

    def get_node(self, index: int) -> str:
        """Return the '0x'-prefixed node hash stored at the array index."""
        ...

    def get_root(self) -> str:
        """Return the '0x'-prefixed latest (untruncated) root."""
        ...


class Side(IntEnum):
    """Side of the tree a sibling node sits on."""
    LEFT = 0
    RIGHT = 1


@dataclass(frozen=True)
class SisterPathEntry:
    """
    One node of a sister path.

    Attributes:
        tree_index: Array index of the node in the tree
        side: Side the sibling sits on; None for the root entry
        node_hash: '0x'-prefixed node hash
    """
    tree_index: int
    side: Optional[Side]
    node_hash: str

    def __post_init__(self):
        if self.tree_index < 0:
            raise ValidationError(f"tree_index must be non-negative, got {self.tree_index}")
        if self.tree_index == 0 and self.side is not None:
            raise ValidationError("The root entry has no sister side")
        if self.tree_index != 0 and self.side is None:
            raise ValidationError(f"Sister node at index {self.tree_index} needs a side")

    @property
    def is_root(self) -> bool:
        return self.tree_index == 0


@dataclass(frozen=True)
class MerklePathResult:
    """
    Sister path from a leaf to the root.

    Attributes:
        siblings: Entries ordered from the leaf's sibling up to the root entry (last)
        positions: '0x'-prefixed hex of one side bit per level, in the same
            leaf-to-root order, right-padded with zero bits to the packing size
    """
    siblings: Tuple[SisterPathEntry, ...]
    positions: str

    @property
    def path(self) -> List[str]:
        """Node hashes in leaf-to-root order, root last."""
        return [entry.node_hash for entry in self.siblings]

    @property
    def root(self) -> str:
        return self.siblings[-1].node_hash

    def position_bits(self, packing_size: int) -> str:
        """
        Decode positions back into one character per level.

        Returns:
            A string of '0'/'1' with one bit per non-root sibling
        """
        bits = hex_to_bin(self.positions)
        if len(bits) < packing_size:
            bits = bits.rjust(packing_size, "0")
        bits = bits[-packing_size:]
        return bits[:len(self.siblings) - 1]


def get_leaf_index_from_z_count(z_count: int, merkle_depth: int) -> int:
    """
    Array index of the leaf inserted z_count-th.

    Args:
        z_count: Zero-based insertion count of the commitment
        merkle_depth: Number of tree levels, including the root level

    Returns:
        2^(merkle_depth-1) - 1 + z_count

    Raises:
        ValidationError: If z_count is not a non-negative integer or exceeds the leaf count
    """
    if isinstance(z_count, bool) or not isinstance(z_count, int):
        raise ValidationError(f"Received something other than an integer: {z_count!r}")
    if z_count < 0:
        raise ValidationError(f"z_count must be non-negative, got {z_count}")
    merkle_width = 2 ** (merkle_depth - 1)
    if z_count >= merkle_width:
        raise ValidationError(f"z_count {z_count} exceeds the {merkle_width} leaves of a depth-{merkle_depth} tree")
    return merkle_width - 1 + z_count


def get_sister_indices(leaf_index: int, merkle_depth: int) -> List[Tuple[int, Side]]:
    """
    Compute the sibling index and side at every level from a leaf to the root.

    An even index is a right child, so its sibling is index - 1 on the left;
    an odd index is a left child with its sibling index + 1 on the right. The
    parent of either is (index - 1) // 2.

    Returns:
        (sibling_index, side) pairs in leaf-to-root order
    """
    indices = []
    p0 = leaf_index
    for _ in range(merkle_depth - 1):
        if p0 % 2 == 0:
            indices.append((p0 - 1, Side.LEFT))
        else:
            indices.append((p0 + 1, Side.RIGHT))
        p0 = (p0 - 1) // 2
    if p0 != 0:
        raise ValidationError(f"Leaf index {leaf_index} does not sit on the last level of a depth-{merkle_depth} tree")
    return indices


def encode_positions(sides: List[Side], packing_size: int) -> str:
    """
    Hex-encode the side bits, right-padded with zeros to packing_size bits.

    The hex is written at the full padded width so leading zero bits survive
    the round trip.
    """
    if len(sides) > packing_size:
        raise ValidationError(f"{len(sides)} position bits do not fit a packing size of {packing_size}")
    bits = "".join(str(int(side)) for side in sides).ljust(packing_size, "0")
    width = -(-packing_size // 4)
    return left_pad_hex(bin_to_hex(bits), width)


def _check_length(node_hash: str, expected_bytes: int, what: str, index: int) -> str:
    digits = require_hex(node_hash)
    if len(digits) != expected_bytes * 2:
        raise LengthMismatchError(
            f"{what} at index {index} has incorrect length: expected {expected_bytes} bytes, "
            f"got {ensure0x(digits)} ({len(digits) / 2:g} bytes)"
        )
    return ensure0x(digits)


def compute_path(
    leaf_value: str,
    z_count: int,
    tree_accessor: TreeAccessor,
    config: TreeConfig,
) -> MerklePathResult:
    """
    Compute the sister path from a commitment to the root of the tree.

    The leaf at the z-count's index is fetched first and must equal the
    commitment truncated to the node length. The siblings and the root are
    then fetched concurrently and correlated back to their tree indices.

    Args:
        leaf_value: '0x'-prefixed commitment of inputs_hash_length bytes
        z_count: Insertion count of the commitment
        tree_accessor: Source of tree nodes and the latest root
        config: Tree shape and packing parameters

    Returns:
        MerklePathResult with leaf-to-root siblings and their encoded positions

    Raises:
        ValidationError: If the commitment is not hex or z_count is invalid
        LengthMismatchError: If the commitment or a fetched node has the wrong
            length, or the leaf at the index is a different commitment
    """
    commitment = require_hex(leaf_value)
    if len(commitment) != config.inputs_hash_length * 2:
        raise LengthMismatchError(
            f"Commitment has incorrect length: {ensure0x(commitment)} "
            f"(expected {config.inputs_hash_length} bytes)"
        )
    truncated = commitment[-config.merkle_hash_length * 2:]
    leaf_index = get_leaf_index_from_z_count(z_count, config.merkle_depth)
    logger.debug(f"Resolving path for commitment {ensure0x(commitment)} at leaf index {leaf_index}")

    leaf = strip0x(tree_accessor.get_node(leaf_index)).lower()
    if leaf != truncated:
        raise LengthMismatchError(
            f"Failed to find the commitment {ensure0x(commitment)} in the tree at index {leaf_index} "
            f"(when truncated to {ensure0x(truncated)}). Found {ensure0x(leaf)} at this index instead."
        )
    logger.debug(f"Found matching commitment {ensure0x(leaf)} at index {leaf_index}")

    sister_indices = get_sister_indices(leaf_index, config.merkle_depth)

    workers = min(config.fetch_workers, len(sister_indices) + 1)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        root_future = executor.submit(tree_accessor.get_root)
        node_futures = {
            index: executor.submit(tree_accessor.get_node, index)
            for index, _ in sister_indices
        }
        # keyed by tree index, never by completion order
        fetched: Dict[int, str] = {index: future.result() for index, future in node_futures.items()}
        root = root_future.result()

    siblings = [
        SisterPathEntry(
            tree_index=index,
            side=side,
            node_hash=_check_length(fetched[index], config.merkle_hash_length, "Sister path node", index),
        )
        for index, side in sister_indices
    ]
    siblings.append(
        SisterPathEntry(
            tree_index=0,
            side=None,
            node_hash=_check_length(root, config.inputs_hash_length, "Root", 0),
        )
    )

    positions = encode_positions([side for _, side in sister_indices], config.packing_size)
    logger.debug(f"Sister positions hex encoding: {positions}")
    logger.info(f"Computed sister path of {len(siblings)} nodes for leaf index {leaf_index}")

    return MerklePathResult(siblings=tuple(siblings), positions=positions)


def path_from_hashes(path: List[str], positions: str, config: TreeConfig) -> MerklePathResult:
    """
    Rebuild a MerklePathResult from bare node hashes and their positions.

    The tree indices are recovered by walking the position bits from the
    root down: a sibling on the right means the current node is a left
    child (2p + 1), otherwise it is a right child (2p + 2).

    Args:
        path: Node hashes in leaf-to-root order, root last
        positions: Hex encoding of the side bits as produced by compute_path
        config: Tree shape and packing parameters

    Raises:
        ValidationError: If the path length does not match the tree depth
    """
    if len(path) != config.merkle_depth:
        raise ValidationError(f"Path has {len(path)} entries, expected {config.merkle_depth}")
    bits = hex_to_bin(require_hex(positions)).rjust(config.packing_size, "0")[-config.packing_size:]
    sides = [Side(int(bit)) for bit in bits[:config.merkle_depth - 1]]

    # node indices on the way down, root first
    node = 0
    sibling_indices = []
    for side in reversed(sides):
        if side == Side.RIGHT:
            node, sibling = 2 * node + 1, 2 * node + 2
        else:
            node, sibling = 2 * node + 2, 2 * node + 1
        sibling_indices.append(sibling)
    sibling_indices.reverse()

    siblings = [
        SisterPathEntry(tree_index=index, side=side, node_hash=ensure0x(require_hex(node_hash)))
        for index, side, node_hash in zip(sibling_indices, sides, path[:-1])
    ]
    siblings.append(SisterPathEntry(tree_index=0, side=None, node_hash=ensure0x(require_hex(path[-1]))))
    return MerklePathResult(siblings=tuple(siblings), positions=ensure0x(require_hex(positions)))
