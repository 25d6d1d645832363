"""
Root Verification

Recomputes the tree root from a commitment and its sister path and checks it
against a target root. Every level hashes an ordered pair of nodes with a
single SHA-256 round; intermediate nodes are truncated to the node length,
the final digest is compared untruncated.
"""

import logging
from typing import List, Sequence

from ..codec.hex_helpers import require_hex, truncate_hex
from ..config import TreeConfig
from ..exceptions import ConsistencyError, ValidationError
from ..hashing import concatenate_then_hash
from .path import MerklePathResult, Side

logger = logging.getLogger(__name__)


def order_before_concatenation(order: str, pair: Sequence[str]) -> List[str]:
    """
    Put a [current, sibling] pair in hashing order.

    A position bit of 1 means the sibling is on the right, so the current
    hash stays on the left; otherwise the pair is swapped.
    """
    if int(order) == Side.RIGHT:
        return list(pair)
    return list(reversed(pair))


def compute_root(commitment: str, path_result: MerklePathResult, config: TreeConfig) -> str:
    """
    Recompute the root implied by a commitment and its sister path.

    Levels are walked in the same leaf-to-root order compute_path produced
    them, reading the matching position bit at each level.

    Returns:
        '0x'-prefixed untruncated root digest

    Raises:
        ValidationError: If the path does not have one entry per tree level
    """
    if len(path_result.siblings) != config.merkle_depth:
        raise ValidationError(
            f"Path has {len(path_result.siblings)} entries, expected {config.merkle_depth} for a depth-{config.merkle_depth} tree"
        )
    require_hex(commitment)
    order = path_result.position_bits(config.packing_size)

    current = truncate_hex(commitment, config.merkle_hash_length)
    digest = current
    for level, entry in enumerate(path_result.siblings[:-1]):
        ordered_pair = order_before_concatenation(order[level], [current, entry.node_hash])
        digest = concatenate_then_hash(*ordered_pair)
        current = truncate_hex(digest, config.merkle_hash_length)
        logger.debug(f"Hash at level {config.merkle_depth - 2 - level}: {current}")
    return digest


def reconcile_root(commitment: str, path_result: MerklePathResult, root: str, config: TreeConfig) -> str:
    """
    Recompute the root once and require it to equal the target root.

    Returns:
        The recomputed '0x'-prefixed root

    Raises:
        ConsistencyError: If the recomputed root differs from the target root
    """
    root_check = compute_root(commitment, path_result, config)

    if require_hex(root) != require_hex(root_check):
        raise ConsistencyError(
            f"Root {root} cannot be recalculated from the path and commitment {commitment}. "
            f"An attempt to recalculate gives {root_check} as the root."
        )
    logger.info("Root successfully reconciled from first principles using the commitment and its sister path")
    return root_check


def check_root(commitment: str, path_result: MerklePathResult, root: str, config: TreeConfig) -> bool:
    """
    Check that a commitment and its sister path reconcile with a root.

    Args:
        commitment: '0x'-prefixed commitment (truncated to the node length internally)
        path_result: Sister path as produced by compute_path
        root: Target root to compare against
        config: Tree shape and packing parameters

    Returns:
        True when the recomputed root equals the target root

    Raises:
        ConsistencyError: If the recomputed root differs from the target root
    """
    reconcile_root(commitment, path_result, root, config)
    return True
