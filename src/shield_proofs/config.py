"""
Tree Configuration

TreeConfig bundles the canonical length constants (tree depth, node and input
hash lengths, field packing size) so they can be passed explicitly into every
component call instead of being read from process-wide state.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .constants import (
    FETCH_WORKERS,
    INPUTS_HASH_LENGTH,
    MERKLE_DEPTH,
    MERKLE_HASH_LENGTH,
    ZOKRATES_PACKING_SIZE,
)
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeConfig:
    """
    Shape of the commitment tree and the circuit's packing parameters.

    Attributes:
        merkle_depth: Number of tree levels, including the root level
        merkle_hash_length: Byte length of stored tree nodes
        inputs_hash_length: Byte length of commitments and of the latest root
        packing_size: Bits per field limb (also the width the position bits are padded to)
        fetch_workers: Maximum number of concurrent sibling fetches
    """
    merkle_depth: int = MERKLE_DEPTH
    merkle_hash_length: int = MERKLE_HASH_LENGTH
    inputs_hash_length: int = INPUTS_HASH_LENGTH
    packing_size: int = ZOKRATES_PACKING_SIZE
    fetch_workers: int = FETCH_WORKERS

    def __post_init__(self):
        if self.merkle_depth < 2:
            raise ValidationError(f"merkle_depth must be at least 2, got {self.merkle_depth}")
        if self.merkle_hash_length <= 0:
            raise ValidationError(f"merkle_hash_length must be positive, got {self.merkle_hash_length}")
        if self.inputs_hash_length < self.merkle_hash_length:
            raise ValidationError(
                f"inputs_hash_length ({self.inputs_hash_length}) must not be shorter "
                f"than merkle_hash_length ({self.merkle_hash_length})"
            )
        if self.inputs_hash_length > 32:
            raise ValidationError(
                f"inputs_hash_length cannot exceed a SHA-256 digest (32 bytes), got {self.inputs_hash_length}"
            )
        if self.packing_size <= 0:
            raise ValidationError(f"packing_size must be positive, got {self.packing_size}")
        if self.merkle_depth - 1 > self.packing_size:
            raise ValidationError(
                f"{self.merkle_depth - 1} position bits do not fit a packing size of {self.packing_size}"
            )
        if self.fetch_workers <= 0:
            raise ValidationError(f"fetch_workers must be positive, got {self.fetch_workers}")

    @property
    def leaf_count(self) -> int:
        """Number of leaf slots in the tree."""
        return 2 ** (self.merkle_depth - 1)

    @property
    def first_leaf_index(self) -> int:
        """Array index of the leftmost leaf."""
        return self.leaf_count - 1

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "TreeConfig":
        """
        Build a configuration from environment variables.

        Reads MERKLE_DEPTH, MERKLE_HASH_LENGTH, INPUTS_HASH_LENGTH,
        ZOKRATES_PACKING_SIZE and FETCH_WORKERS, after loading a .env file
        if one is present. Unset variables fall back to the defaults.

        Args:
            env_file: Optional path of a .env file to load

        Returns:
            A validated TreeConfig

        Raises:
            ValidationError: If a variable is not an integer or the resulting shape is invalid
        """
        load_dotenv(env_file)

        def _int_env(name: str, default: int) -> int:
            raw = os.getenv(name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw, 10)
            except ValueError:
                raise ValidationError(f"{name} must be an integer, got {raw!r}")

        config = cls(
            merkle_depth=_int_env("MERKLE_DEPTH", MERKLE_DEPTH),
            merkle_hash_length=_int_env("MERKLE_HASH_LENGTH", MERKLE_HASH_LENGTH),
            inputs_hash_length=_int_env("INPUTS_HASH_LENGTH", INPUTS_HASH_LENGTH),
            packing_size=_int_env("ZOKRATES_PACKING_SIZE", ZOKRATES_PACKING_SIZE),
            fetch_workers=_int_env("FETCH_WORKERS", FETCH_WORKERS),
        )
        logger.debug(f"Loaded tree configuration from environment: {config}")
        return config
