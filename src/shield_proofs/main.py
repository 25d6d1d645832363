"""
Shield Proofs - Witness preparation

This module contains the functions shared by the CLI and the API for
preparing circuit inputs: resolving and re-checking a commitment's sister
path, and encoding element lists into witness vectors.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .codec.hex_helpers import ensure0x
from .config import TreeConfig
from .element import Element
from .exceptions import ValidationError
from .merkle.path import MerklePathResult, TreeAccessor, compute_path
from .merkle.verify import check_root
from .vectors import compute_vectors

logger = logging.getLogger(__name__)


@dataclass
class PathWitnessResult:
    """Container for a resolved and verified sister path."""
    commitment: str
    z_count: int
    leaf_index: int
    path: MerklePathResult
    root: str
    vector: List[str]
    metadata: Dict[str, Any] = field(default_factory=dict)


def path_elements(commitment: str, path: MerklePathResult, config: TreeConfig) -> List[Element]:
    """
    Elements for the membership part of a witness.

    The commitment and every non-root sister node are packed as field
    limbs, the position bits as one field element, and the root as limbs.
    """
    elements = [Element(commitment, "field", config.packing_size)]
    elements.extend(Element(entry.node_hash, "field", config.packing_size) for entry in path.siblings[:-1])
    elements.append(Element(path.positions, "field", config.packing_size, packets=1))
    elements.append(Element(path.root, "field", config.packing_size))
    return elements


def generate_path_witness(
    commitment: str,
    z_count: int,
    tree_accessor: TreeAccessor,
    config: TreeConfig,
) -> PathWitnessResult:
    """
    Resolve a commitment's sister path and verify it against the tree's root.

    Args:
        commitment: '0x'-prefixed commitment
        z_count: Insertion count of the commitment
        tree_accessor: Source of tree nodes
        config: Tree shape and packing parameters

    Returns:
        PathWitnessResult with the path, its root and the encoded witness vector

    Raises:
        LengthMismatchError: If the commitment is not at the expected leaf
        ConsistencyError: If the path does not reconcile with the root it was fetched with
    """
    commitment = ensure0x(commitment)
    path = compute_path(commitment, z_count, tree_accessor, config)
    root = path.root
    check_root(commitment, path, root, config)

    vector = compute_vectors(path_elements(commitment, path, config))
    leaf_index = config.first_leaf_index + z_count

    metadata = {
        "merkle_depth": config.merkle_depth,
        "merkle_hash_length": config.merkle_hash_length,
        "packing_size": config.packing_size,
        "path_length": len(path.siblings),
        "vector_length": len(vector),
    }
    logger.info(f"Generated path witness for z-count {z_count} (leaf index {leaf_index})")

    return PathWitnessResult(
        commitment=commitment,
        z_count=z_count,
        leaf_index=leaf_index,
        path=path,
        root=root,
        vector=vector,
        metadata=metadata,
    )


def element_from_dict(data: Dict[str, Any]) -> Element:
    """Build an Element from a JSON-style dict (value, encoding, packing_size, packets, allow_truncation)."""
    if not isinstance(data, dict):
        raise ValidationError(f"Element definition must be an object, got {data!r}")
    kwargs = {"value": data.get("value", data.get("hex")), "encoding": data.get("encoding")}
    for key in ("packing_size", "packets", "allow_truncation"):
        if data.get(key) is not None:
            kwargs[key] = data[key]
    return Element(**kwargs)


def load_elements(elements_file: str) -> List[Element]:
    """Load a JSON list of element definitions from a file."""
    with open(elements_file, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("elements", [])
    if not isinstance(data, list):
        raise ValidationError(f"{elements_file} must hold a list of elements")
    return [element_from_dict(item) for item in data]


def generate_vectors_from_file(elements_file: str) -> List[str]:
    """Load element definitions from a file and encode them."""
    elements = load_elements(elements_file)
    logger.info(f"Loaded {len(elements)} elements from {elements_file}")
    return compute_vectors(elements)
