"""
Numeric Base Conversions

Lossless conversion between hex, binary and decimal string representations
of integers that routinely exceed machine word size (254 to 256 bit values).

The core routine, convert_base, works on digit arrays with schoolbook
addition and doubling, so no intermediate value is ever held as a float or
truncated to a fixed width.
"""

from typing import List

from ..exceptions import ValidationError
from .hex_helpers import ensure0x, require_hex

DIGIT_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _check_base(base: int) -> None:
    if not isinstance(base, int) or not 2 <= base <= len(DIGIT_ALPHABET):
        raise ValidationError(f"Unsupported base: {base}")


def parse_to_digits_array(digits: str, base: int) -> List[int]:
    """
    Convert a numeric string into an array of digit values.

    The array is least-significant digit first, which is the order the
    arithmetic helpers below expect.

    Args:
        digits: Numeric string in the given base (no prefix)
        base: Base of the input digits

    Returns:
        List of digit values, least significant first

    Raises:
        ValidationError: If a character is outside the base's alphabet

    Examples:
        >>> parse_to_digits_array("1f", 16)
        [15, 1]
    """
    _check_base(base)
    if not digits:
        raise ValidationError("Cannot parse an empty numeric string")

    output = []
    for char in reversed(digits.lower()):
        value = DIGIT_ALPHABET.find(char)
        if value < 0 or value >= base:
            raise ValidationError(f"Character {char!r} is not a valid base-{base} digit in {digits!r}")
        output.append(value)
    return output


def add_digits(x: List[int], y: List[int], base: int) -> List[int]:
    """Add two little-endian digit arrays in the given base."""
    z = []
    n = max(len(x), len(y))
    carry = 0
    i = 0
    while i < n or carry:
        xi = x[i] if i < len(x) else 0
        yi = y[i] if i < len(y) else 0
        zi = carry + xi + yi
        z.append(zi % base)
        carry = zi // base
        i += 1
    return z


def multiply_by_number(num: int, x: List[int], base: int) -> List[int]:
    """
    Multiply a little-endian digit array by a small non-negative integer.

    Uses double-and-add over the bits of num, so only add_digits is needed.
    """
    if num < 0:
        raise ValidationError(f"Cannot multiply by a negative number: {num}")
    if num == 0:
        return []

    result: List[int] = []
    power = x
    while True:
        if num & 1:
            result = add_digits(result, power, base)
        num >>= 1
        if num == 0:
            break
        power = add_digits(power, power, base)
    return result


def convert_base(digits: str, from_base: int, to_base: int) -> str:
    """
    Convert a numeric string from one base to another.

    Accumulates digit * from_base^i directly in the target base; at the start
    of iteration i, `power` holds from_base^i.

    Args:
        digits: Input digits (no prefix)
        from_base: Base of the input
        to_base: Base to convert to

    Returns:
        The converted digits without leading zeros; "0" if the input denotes zero

    Raises:
        ValidationError: If the input contains characters outside from_base

    Examples:
        >>> convert_base("ff", 16, 10)
        "255"
        >>> convert_base("0000", 16, 2)
        "0"
    """
    _check_base(to_base)
    digit_array = parse_to_digits_array(digits, from_base)

    out_array: List[int] = []
    power = [1]
    for digit in digit_array:
        if digit:
            out_array = add_digits(out_array, multiply_by_number(digit, power, to_base), to_base)
        power = multiply_by_number(from_base, power, to_base)

    out = "".join(DIGIT_ALPHABET[d] for d in reversed(out_array))
    # an all-zero input never adds anything to out_array
    if out == "":
        out = "0"
    return out


# FUNCTIONS ON HEX VALUES

def hex_to_dec(hex_str: str) -> str:
    """Convert a hex string (with or without '0x') to a decimal string."""
    return convert_base(require_hex(hex_str), 16, 10)


def hex_to_bin(hex_str: str) -> str:
    """
    Expand a hex string to its full binary string, 4 bits per hex digit.

    Leading zeros are kept, so the result length is always 4 * len(digits).

    Examples:
        >>> hex_to_bin("0x0f")
        "00001111"
    """
    return "".join(convert_base(d, 16, 2).rjust(4, "0") for d in require_hex(hex_str))


def hex_to_bin_simple(hex_str: str) -> str:
    """Convert a hex string to the binary string of its magnitude (no leading zeros)."""
    return convert_base(require_hex(hex_str), 16, 2)


def hex_to_bytes(hex_str: str) -> List[str]:
    """
    Convert a hex string into the decimal value of each of its bytes.

    An odd number of digits is left-padded with a zero first.

    Examples:
        >>> hex_to_bytes("0xff00")
        ["255", "0"]
    """
    digits = require_hex(hex_str)
    if len(digits) % 2 == 1:
        digits = "0" + digits
    return [convert_base(digits[i:i + 2], 16, 10) for i in range(0, len(digits), 2)]


def hex_to_field(hex_str: str, field_size: int) -> str:
    """
    Convert a hex string to an element of the finite field GF(field_size).

    Unlike hex_to_field_preserve this reduces the value modulo the field
    order, so magnitude is lost for values larger than the field.

    Returns:
        Decimal string of the reduced value
    """
    if field_size <= 0:
        raise ValidationError(f"field_size must be positive, got {field_size}")
    return str(int(hex_to_dec(hex_str)) % field_size)


# FUNCTIONS ON BINARY VALUES

def bin_to_dec(bin_str: str) -> str:
    """Convert a binary string to a decimal string."""
    return convert_base(bin_str, 2, 10)


def bin_to_hex(bin_str: str) -> str:
    """Convert a binary string to a '0x'-prefixed hex string of its magnitude."""
    return ensure0x(convert_base(bin_str, 2, 16))


# FUNCTIONS ON DECIMAL VALUES

def dec_to_hex(dec_str: str) -> str:
    """Convert a decimal string to a '0x'-prefixed hex string."""
    return ensure0x(convert_base(str(dec_str), 10, 16))


def dec_to_bin(dec_str: str) -> str:
    """Convert a decimal string to a binary string."""
    return convert_base(str(dec_str), 10, 2)
