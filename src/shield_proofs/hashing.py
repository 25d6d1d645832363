"""
Digest Folding

Hash helpers that match the shield contract and the proving circuit.

The circuit can only afford a single SHA-256 round per hash, whose safe input
capacity is two node lengths (432 bits for 27-byte nodes). Longer inputs are
folded: the concatenation is cut into round-sized blocks from the right, each
block is hashed and truncated, and the truncated digests are hashed again
until one node-length hash remains. This is not the same value a multi-round
SHA-256 would give, but it is what the circuit computes.
"""

import logging
from hashlib import sha256

from .codec.hex_helpers import ensure0x, require_hex
from .exceptions import ConsistencyError, ValidationError

logger = logging.getLogger(__name__)


def concat_hex_to_single_string(*items: str) -> str:
    """
    Concatenate the raw bytes of several hex strings.

    Each item loses its '0x' and is read as bytes (odd digit counts are
    left-padded with a zero), so the result is the hex of the byte-wise
    concatenation, without a prefix.

    Raises:
        ValidationError: If no items are given or an item is not hex

    Examples:
        >>> concat_hex_to_single_string("0x01", "0x0203")
        "010203"
    """
    if not items:
        raise ValidationError("Nothing to concatenate")
    parts = []
    for item in items:
        digits = require_hex(item)
        if len(digits) % 2 == 1:
            digits = "0" + digits
        parts.append(digits)
    return "".join(parts)


def _digest_hex(hex_str: str) -> str:
    return sha256(bytes.fromhex(hex_str)).hexdigest()


def hash_concat(*items: str, hash_length: int) -> str:
    """
    Hash a concatenation of items with a single SHA-256 round.

    The digest is truncated to its rightmost hash_length bytes.

    Args:
        items: Hex strings to concatenate
        hash_length: Bytes to keep from the digest

    Returns:
        '0x'-prefixed truncated digest
    """
    _check_hash_length(hash_length)
    concat_value = concat_hex_to_single_string(*items)
    return ensure0x(_digest_hex(concat_value)[-hash_length * 2:])


def hash_chunks(concatenated: str, hash_length: int) -> str:
    """
    Fold a hex string once, one round-sized block at a time.

    Blocks of 2 * hash_length bytes are sliced off the right-hand end (the
    leftmost block may be shorter); each block is hashed, truncated to
    hash_length bytes and prepended to the accumulator.

    Args:
        concatenated: Unprefixed hex string of even length
        hash_length: Node hash length in bytes

    Returns:
        Unprefixed hex of the concatenated truncated block digests
    """
    _check_hash_length(hash_length)
    block = hash_length * 4  # hex digits in one round
    remaining = concatenated
    folded = []
    while remaining:
        slc = remaining[-block:]
        remaining = remaining[:-block]
        folded.append(_digest_hex(slc)[-hash_length * 2:])
    return "".join(reversed(folded))


def recursive_hash_concat(*items: str, hash_length: int) -> str:
    """
    Hash an arbitrary-length concatenation using only single-round digests.

    The concatenation is folded with hash_chunks until at most one
    node-length hash remains. Whenever the whole input fits a single round
    the result equals hash_concat(*items).

    Args:
        items: Hex strings to concatenate
        hash_length: Node hash length in bytes

    Returns:
        '0x'-prefixed hash of hash_length bytes
    """
    conc = concat_hex_to_single_string(*items)

    digest = hash_chunks(conc, hash_length)
    while len(digest) > hash_length * 2:
        digest = hash_chunks(digest, hash_length)
    return ensure0x(digest)


def checked_hash_concat(*items: str, hash_length: int) -> str:
    """
    Hash items by folding, cross-checked against a single round where possible.

    If the concatenation fits one hashing round, recursive_hash_concat and
    hash_concat must agree; a disagreement means the two code paths have
    diverged and is reported as a ConsistencyError.

    Raises:
        ConsistencyError: If the folded and single-round hashes differ
    """
    folded = recursive_hash_concat(*items, hash_length=hash_length)
    conc = concat_hex_to_single_string(*items)
    if len(conc) <= hash_length * 4:
        direct = hash_concat(*items, hash_length=hash_length)
        if direct != folded:
            raise ConsistencyError(
                f"Folded hash {folded} disagrees with single-round hash {direct} "
                f"for an input of {len(conc) // 2} bytes"
            )
    return folded


def concatenate_then_hash(*items: str) -> str:
    """
    Concatenate the raw bytes of the items and hash them once, untruncated.

    This is the node hash of the tree: callers truncate the result to the
    node length themselves, except at the root.

    Returns:
        '0x'-prefixed 32-byte SHA-256 digest
    """
    concat_value = concat_hex_to_single_string(*items)
    return ensure0x(_digest_hex(concat_value))


def _check_hash_length(hash_length: int) -> None:
    if not isinstance(hash_length, int) or not 0 < hash_length <= 32:
        raise ValidationError(f"hash_length must be between 1 and 32 bytes, got {hash_length}")
