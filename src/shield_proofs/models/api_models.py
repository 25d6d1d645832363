"""
API Models

This module defines Pydantic models for API request and response validation.
These models ensure proper data structure and type validation for the witness API.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..codec.hex_helpers import ensure0x, is_hex
from ..constants import ALLOWED_ENCODINGS, ZOKRATES_PACKING_SIZE


def _require_prefixed_hex(v: str) -> str:
    if not isinstance(v, str) or v[:2].lower() != "0x" or not is_hex(v):
        raise ValueError("Must be a hex string starting with '0x'")
    return ensure0x(v)


class ErrorResponse(BaseModel):
    """
    Response model for API errors.

    Attributes:
        error: Error message
        code: Error code (string identifier)
        details: Additional error details
    """
    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    details: Optional[dict] = Field(default=None, description="Additional error details")


class HealthResponse(BaseModel):
    """
    Response model for health check endpoint.

    Attributes:
        status: Service status
        tree_accessor: Tree accessor connectivity status
        version: Service version
        timestamp: Response timestamp
    """
    status: str = Field(..., description="Service status")
    tree_accessor: bool = Field(..., description="Tree accessor connectivity")
    version: str = Field(default="0.1.0", description="Service version")
    timestamp: Optional[str] = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Response timestamp",
    )


class ElementModel(BaseModel):
    """A single witness element as sent over the API."""
    value: str = Field(..., description="Hex value with 0x prefix")
    encoding: str = Field(..., description="One of 'bits', 'bytes', 'field', 'scalar'")
    packing_size: int = Field(default=ZOKRATES_PACKING_SIZE, gt=0, description="Bits per field limb")
    packets: Optional[int] = Field(default=None, gt=0, description="Number of limbs to produce")
    allow_truncation: bool = Field(default=False, description="Allow dropping most-significant limbs")

    @field_validator("value")
    @classmethod
    def validate_value(cls, v):
        """Validate value is a prefixed hex string."""
        return _require_prefixed_hex(v)

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v):
        """Validate encoding is one of the supported tags."""
        if v not in ALLOWED_ENCODINGS:
            raise ValueError(f"Encoding must be one of {list(ALLOWED_ENCODINGS)}")
        return v


class VectorRequest(BaseModel):
    """Request model for witness vector encoding."""
    elements: List[ElementModel] = Field(..., min_length=1, description="Elements in circuit argument order")


class VectorResponse(BaseModel):
    """Response model for witness vector encoding."""
    vector: List[str] = Field(..., description="Decimal witness values in order")
    length: int = Field(..., description="Number of witness values")


class SisterNodeModel(BaseModel):
    """One entry of a sister path."""
    tree_index: int = Field(..., ge=0, description="Array index of the node")
    side: Optional[int] = Field(default=None, description="0 = sibling on the left, 1 = on the right, null for the root")
    node_hash: str = Field(..., description="Node hash as hex string")

    @field_validator("node_hash")
    @classmethod
    def validate_node_hash(cls, v):
        return _require_prefixed_hex(v)

    @field_validator("side")
    @classmethod
    def validate_side(cls, v):
        if v is not None and v not in (0, 1):
            raise ValueError("side must be 0, 1 or null")
        return v


class PathResponse(BaseModel):
    """
    Response model for a resolved sister path.

    Attributes:
        commitment: The commitment the path was computed for
        z_count: Insertion count of the commitment
        leaf_index: Array index of the leaf
        path: Node hashes from the leaf's sibling up to the root
        siblings: Full sister path entries
        positions: Hex encoding of the side bits
        root: Latest root the path was checked against
        vector: Witness vector for the path
        metadata: Tree parameters used
    """
    commitment: str = Field(..., description="Commitment as hex string")
    z_count: int = Field(..., description="Insertion count")
    leaf_index: int = Field(..., description="Array index of the leaf")
    path: List[str] = Field(..., description="Sister path node hashes, leaf to root")
    siblings: List[SisterNodeModel] = Field(..., description="Sister path entries, leaf to root")
    positions: str = Field(..., description="Hex encoding of the sister positions")
    root: str = Field(..., description="Root as hex string")
    vector: List[str] = Field(default_factory=list, description="Witness vector for the path")
    metadata: dict = Field(default_factory=dict, description="Tree parameters")

    @field_validator("path")
    @classmethod
    def validate_path_format(cls, v):
        """Validate path nodes are proper hex strings."""
        return [_require_prefixed_hex(step) for step in v]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "commitment": "0x" + "ab" * 32,
                "z_count": 0,
                "leaf_index": 3,
                "path": ["0x" + "00" * 27, "0x" + "11" * 27, "0x" + "cd" * 32],
                "siblings": [
                    {"tree_index": 4, "side": 1, "node_hash": "0x" + "00" * 27},
                    {"tree_index": 2, "side": 1, "node_hash": "0x" + "11" * 27},
                    {"tree_index": 0, "side": None, "node_hash": "0x" + "cd" * 32},
                ],
                "positions": "0xc0000000000000000000000000000000",
                "root": "0x" + "cd" * 32,
                "vector": [],
                "metadata": {"merkle_depth": 3, "packing_size": 128},
            }
        }
    )


class RootCheckRequest(BaseModel):
    """Request model for checking a commitment's path against a root."""
    commitment: str = Field(..., description="Commitment as hex string")
    path: List[str] = Field(..., min_length=1, description="Sister path node hashes, leaf to root, root last")
    positions: str = Field(..., description="Hex encoding of the sister positions")
    root: str = Field(..., description="Root to check against")

    @field_validator("commitment", "positions", "root")
    @classmethod
    def validate_hex_format(cls, v):
        """Validate hex string format."""
        return _require_prefixed_hex(v)

    @field_validator("path")
    @classmethod
    def validate_path_format(cls, v):
        return [_require_prefixed_hex(step) for step in v]


class RootCheckResponse(BaseModel):
    """Response model for a successful root check."""
    valid: bool = Field(..., description="Whether the root was reconciled")
    root: str = Field(..., description="Recomputed root")


class HashRequest(BaseModel):
    """Request model for hashing a concatenation of hex items."""
    items: List[str] = Field(..., min_length=1, description="Hex items to concatenate")
    mode: str = Field(default="recursive", description="'single', 'recursive' or 'node'")
    hash_length: Optional[int] = Field(default=None, gt=0, le=32, description="Truncation length in bytes")

    @field_validator("items")
    @classmethod
    def validate_items(cls, v):
        return [_require_prefixed_hex(item) for item in v]

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v):
        if v not in ("single", "recursive", "node"):
            raise ValueError("mode must be 'single', 'recursive' or 'node'")
        return v


class HashResponse(BaseModel):
    """Response model for hashing."""
    hash: str = Field(..., description="Resulting hash as hex string")
    mode: str = Field(..., description="Hashing mode used")
