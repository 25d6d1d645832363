"""
Witness Service Module

This module provides a service layer for preparing circuit witnesses
using the shared functions from main.py.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..config import TreeConfig
from ..element import Element
from ..exceptions import TreeAccessError, WitnessError
from ..hashing import checked_hash_concat, concatenate_then_hash, hash_concat
from ..main import PathWitnessResult, element_from_dict, generate_path_witness
from ..merkle.path import TreeAccessor, path_from_hashes
from ..merkle.verify import reconcile_root
from ..vectors import compute_vectors

logger = logging.getLogger(__name__)


class WitnessServiceError(Exception):
    """Custom exception for witness service operations."""
    pass


class WitnessService:
    """Service for resolving sister paths and encoding witness vectors."""

    def __init__(self, tree_accessor: Optional[TreeAccessor] = None, config: Optional[TreeConfig] = None):
        """
        Initialize the witness service.

        Args:
            tree_accessor: Source of tree nodes. If None, a ShieldContractClient
                          is only created when a path is requested.
            config: Tree parameters. If None, read from the environment.
        """
        self.tree_accessor = tree_accessor
        self.config = config or TreeConfig.from_env()

    def _get_tree_accessor(self) -> TreeAccessor:
        if self.tree_accessor is None:
            from .tree_client import ShieldContractClient
            try:
                self.tree_accessor = ShieldContractClient()
            except ValueError as e:
                raise TreeAccessError(f"Tree accessor is not configured: {e}")
        return self.tree_accessor

    @staticmethod
    def format_path_result(result: PathWitnessResult) -> Dict[str, Any]:
        """Format a PathWitnessResult for a JSON response."""
        return {
            "commitment": result.commitment,
            "z_count": result.z_count,
            "leaf_index": result.leaf_index,
            "path": result.path.path,
            "siblings": [
                {
                    "tree_index": entry.tree_index,
                    "side": None if entry.side is None else int(entry.side),
                    "node_hash": entry.node_hash,
                }
                for entry in result.path.siblings
            ],
            "positions": result.path.positions,
            "root": result.root,
            "vector": result.vector,
            "metadata": result.metadata,
        }

    def get_path_witness(self, commitment: str, z_count: int) -> Dict[str, Any]:
        """
        Resolve and check a commitment's sister path.

        Args:
            commitment: '0x'-prefixed commitment
            z_count: Insertion count of the commitment

        Returns:
            Dictionary with the path, positions, root and witness vector

        Raises:
            WitnessError: Validation, length or consistency failures
            TreeAccessError: If the tree cannot be read
            WitnessServiceError: If anything else goes wrong
        """
        try:
            result = generate_path_witness(commitment, z_count, self._get_tree_accessor(), self.config)
            return self.format_path_result(result)
        except WitnessError:
            # Core errors and TreeAccessError carry their own status mapping
            raise
        except Exception as e:
            logger.error(f"Error generating path witness: {e}")
            raise WitnessServiceError(f"Failed to generate path witness: {e}")

    def encode_vectors(self, elements: Iterable[Any]) -> List[str]:
        """
        Encode elements into a witness vector.

        Elements may be Element instances or dicts with value/encoding keys.
        """
        try:
            prepared = [item if isinstance(item, Element) else element_from_dict(item) for item in elements]
            return compute_vectors(prepared)
        except WitnessError:
            raise
        except Exception as e:
            logger.error(f"Error encoding witness vector: {e}")
            raise WitnessServiceError(f"Failed to encode witness vector: {e}")

    def check_root(self, commitment: str, path: List[str], positions: str, root: str) -> Dict[str, Any]:
        """
        Check a client-supplied path against a root.

        Raises:
            ConsistencyError: If the path does not reconcile with the root
        """
        path_result = path_from_hashes(path, positions, self.config)
        recomputed = reconcile_root(commitment, path_result, root, self.config)
        return {"valid": True, "root": recomputed}

    def hash_items(self, items: List[str], mode: str = "recursive", hash_length: Optional[int] = None) -> str:
        """
        Hash a concatenation of hex items.

        Modes:
            single: one SHA-256 round truncated to hash_length
            recursive: fold long inputs down to hash_length, cross-checked
                       against a single round when the input fits one
            node: the untruncated digest used for tree nodes
        """
        length = hash_length or self.config.merkle_hash_length
        if mode == "single":
            return hash_concat(*items, hash_length=length)
        if mode == "recursive":
            return checked_hash_concat(*items, hash_length=length)
        if mode == "node":
            return concatenate_then_hash(*items)
        raise WitnessServiceError(f"Unknown hashing mode: {mode}")

    def health_check(self) -> bool:
        """Check whether the tree accessor is reachable."""
        try:
            accessor = self._get_tree_accessor()
        except TreeAccessError as e:
            logger.warning(f"Tree accessor unavailable: {e}")
            return False
        checker = getattr(accessor, "health_check", None)
        if checker is None:
            return True
        return bool(checker())
