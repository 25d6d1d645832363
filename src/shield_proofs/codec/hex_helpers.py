"""
Hex String Utilities

This module handles the hex prefix convention used at the package boundary:
every value crossing in or out carries a leading '0x', while the algorithms
inside work on the unprefixed digits.
"""

import re
import secrets
from typing import Any, Optional

from ..constants import HEX_PREFIX
from ..exceptions import ValidationError

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def strip0x(value: Any) -> str:
    """
    Remove a leading '0x' (or '0X') from a hex string.

    The operation is idempotent: a string without the prefix is returned
    unaltered.

    Args:
        value: Hex string (with or without '0x'); ints are rendered as hex

    Returns:
        The unprefixed hex digits

    Raises:
        ValidationError: If the input is None or empty

    Examples:
        >>> strip0x("0x1234")
        "1234"
        >>> strip0x("1234")
        "1234"
    """
    if value is None or value == "":
        raise ValidationError("Received null or empty input")
    if isinstance(value, int):
        return format(value, "x")
    hex_str = str(value)
    if _has_prefix(hex_str):
        return hex_str[2:]
    return hex_str


def _has_prefix(hex_str: str) -> bool:
    return hex_str[:2].lower() == HEX_PREFIX


def ensure0x(value: Any) -> str:
    """
    Add a leading '0x' to a hex string if it is not already present.

    Examples:
        >>> ensure0x("1234")
        "0x1234"
        >>> ensure0x("0x1234")
        "0x1234"
    """
    if value is None or value == "":
        raise ValidationError("Received null or empty input")
    if isinstance(value, int):
        return f"{HEX_PREFIX}{value:x}"
    hex_str = str(value)
    if _has_prefix(hex_str):
        return f"{HEX_PREFIX}{hex_str[2:]}"
    return f"{HEX_PREFIX}{hex_str}"


def is_hex(value: Any) -> bool:
    """
    Check that the input consists of hex digits only.

    A leading '0x' is ignored, so "0x123abc" and "123abc" are both hex.
    """
    try:
        digits = strip0x(value)
    except ValidationError:
        return False
    return bool(_HEX_RE.match(digits))


def require_hex(value: Any) -> str:
    """
    Strip the prefix and reject anything that is not a non-empty hex string.

    Returns:
        The unprefixed, lower-cased hex digits

    Raises:
        ValidationError: If the value is empty or contains non-hex characters
    """
    digits = strip0x(value)
    if not _HEX_RE.match(digits):
        raise ValidationError(f"Invalid hex string: {value}")
    return digits.lower()


def normalize_hex(hex_str: str, expected_bytes: Optional[int] = None) -> str:
    """
    Normalize a hex string to an even number of lower-case digits with '0x'.

    Args:
        hex_str: The hex string to normalize (with or without '0x')
        expected_bytes: Optional expected byte length for validation

    Returns:
        Normalized hex string with proper padding

    Raises:
        ValidationError: If the hex string contains invalid characters or has the wrong length

    Examples:
        >>> normalize_hex("0x123")
        "0x0123"
        >>> normalize_hex("ABCD")
        "0xabcd"
    """
    hex_part = require_hex(hex_str)

    # Pad to even length
    if len(hex_part) % 2 == 1:
        hex_part = "0" + hex_part

    if expected_bytes is not None:
        actual_bytes = len(hex_part) // 2
        if actual_bytes != expected_bytes:
            raise ValidationError(f"Expected {expected_bytes} bytes, got {actual_bytes} bytes")

    return HEX_PREFIX + hex_part


def hex_byte_length(hex_str: str) -> int:
    """Number of whole bytes spelled out by a hex string."""
    return (len(strip0x(hex_str)) + 1) // 2


def left_pad_hex(hex_str: str, n: int) -> str:
    """
    Left-pad a hex string with zeros to n hex digits.

    Examples:
        >>> left_pad_hex("0xabc", 6)
        "0x000abc"
    """
    return ensure0x(require_hex(hex_str).rjust(n, "0"))


def pad_hex(hex_str: str, bit_length: int) -> str:
    """
    Left-pad a hex string so it spells out exactly bit_length bits.

    Raises:
        ValidationError: If bit_length is not a whole number of bytes
    """
    if bit_length % 8 != 0:
        raise ValidationError("cannot convert bits into a whole number of bytes")
    return left_pad_hex(hex_str, bit_length // 4)


def truncate_hex(hex_str: str, n_bytes: int) -> str:
    """
    Keep the rightmost n_bytes of a hex string.

    Truncation always drops the most-significant bytes, which is how tree
    nodes are shortened from a full digest to the stored node length.

    Examples:
        >>> truncate_hex("0x11223344", 2)
        "0x3344"
    """
    return HEX_PREFIX + require_hex(hex_str)[-n_bytes * 2:]


def utf8_string_to_hex(text: str, out_length_bytes: int) -> str:
    """
    Convert a string into a hex representation of fixed byte length.

    If the encoded string is too short it is padded on the left with zeros.

    Raises:
        ValidationError: If the encoded string does not fit out_length_bytes
    """
    hex_str = text.encode("utf-8").hex()
    out_length = out_length_bytes * 2
    if len(hex_str) > out_length:
        raise ValidationError("String is too long, try increasing the length of the output hex")
    return ensure0x(hex_str.rjust(out_length, "0"))


def hex_to_utf8_string(hex_str: str) -> str:
    """Inverse of utf8_string_to_hex: drop zero padding bytes and decode."""
    digits = require_hex(hex_str)
    if len(digits) % 2 == 1:
        digits = "0" + digits
    data = bytes.fromhex(digits).replace(b"\x00", b"")
    return data.decode("utf-8")


def rnd_hex(n_bytes: int) -> str:
    """
    Generate n_bytes of cryptographically secure randomness as hex.

    Used for salts and secret keys that feed commitments.
    """
    if n_bytes <= 0:
        raise ValidationError(f"n_bytes must be positive, got {n_bytes}")
    return HEX_PREFIX + secrets.token_hex(n_bytes)
