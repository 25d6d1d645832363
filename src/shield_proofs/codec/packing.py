"""
Field Limb Packing

Splits values that are larger than the proving circuit's field into
fixed-width, big-endian limbs ("packing"), and reassembles them.

A 256-bit value does not fit the ~254-bit BN128 field, so it is carried into
the circuit as several limbs of packing_size bits each, most-significant limb
first. The circuit recombines them as sum(limb_i * 2^(packing_size * k_i)).
"""

import logging
from typing import List, Optional, Sequence

from ..exceptions import PackingOverflowError, ValidationError
from .conversions import bin_to_dec, dec_to_bin, hex_to_bin_simple
from .hex_helpers import require_hex

logger = logging.getLogger(__name__)


def left_pad_bits_n(bit_str: str, n: int) -> str:
    """
    Left-pad a binary string with zeros so it becomes exactly n bits.

    Raises:
        ValidationError: If the string is already longer than n bits
    """
    if len(bit_str) > n:
        raise ValidationError(f"String larger than {n} bits passed to left_pad_bits_n")
    return bit_str.rjust(n, "0")


def split_and_pad_bits_n(bit_str: str, n: int) -> List[str]:
    """
    Split a big-endian binary string into n-bit chunks.

    The rightmost n bits are peeled off as a complete chunk, repeatedly; the
    leftmost remainder is the only chunk that can be shorter than n, and it is
    left-padded with zeros. The result has ceil(len(bit_str) / n) chunks (at
    least one), all exactly n bits wide, most significant first.

    Args:
        bit_str: A binary number string
        n: Chunk size in bits

    Returns:
        List of n-bit chunks which together represent the input

    Examples:
        >>> split_and_pad_bits_n("1111100", 4)
        ["0111", "1100"]
    """
    if n <= 0:
        raise ValidationError(f"Chunk size must be positive, got {n}")
    if bit_str and set(bit_str) - {"0", "1"}:
        raise ValidationError(f"Not a binary string: {bit_str}")

    chunks: List[str] = []
    remainder = bit_str
    while len(remainder) > n:
        chunks.append(remainder[-n:])
        remainder = remainder[:-n]
    chunks.append(left_pad_bits_n(remainder, n))
    chunks.reverse()
    return chunks


def split_hex_to_bits_n(hex_str: str, n: int) -> List[str]:
    """Split the magnitude of a hex number into n-bit chunks (see split_and_pad_bits_n)."""
    return split_and_pad_bits_n(hex_to_bin_simple(hex_str), n)


def split_dec_to_bits_n(dec_str: str, n: int) -> List[str]:
    """Split the magnitude of a decimal number into n-bit chunks (see split_and_pad_bits_n)."""
    return split_and_pad_bits_n(dec_to_bin(dec_str), n)


def declared_packets(hex_str: str, packing_size: int) -> int:
    """
    Number of limbs implied by the width the hex string is written at.

    "0x" followed by 64 digits declares 256 bits, i.e. two 128-bit limbs,
    even when the leading digits are zero.
    """
    width_bits = len(require_hex(hex_str)) * 4
    return max(1, -(-width_bits // packing_size))


def hex_to_field_preserve(
    hex_str: str,
    packing_size: int,
    packets: Optional[int] = None,
    allow_truncation: bool = False,
) -> List[str]:
    """
    Pack a hex number into decimal field limbs without losing magnitude.

    The hex value is converted to bits, split into packing_size-bit chunks,
    and each chunk is converted to decimal (fields work on decimal integer
    representations). The output is then fitted to the requested number of
    packets:

    - fewer chunks than packets: left-padded with "0" limbs
    - more chunks than packets: the most-significant chunks would be dropped,
      so this raises PackingOverflowError unless allow_truncation is set

    When packets is omitted, the width the hex string is written at decides
    the limb count (see declared_packets).

    Args:
        hex_str: Hex value, with or without '0x'
        packing_size: Bits per limb (the circuit uses 128)
        packets: Desired number of output limbs
        allow_truncation: Explicitly accept dropping significant limbs

    Returns:
        Decimal-string limbs, most significant first

    Raises:
        ValidationError: If the input is malformed or the packing parameters are invalid
        PackingOverflowError: If limbs would be dropped without allow_truncation

    Examples:
        >>> hex_to_field_preserve("0x" + "ff" * 32, 128)
        ["340282366920938463463374607431768211455", "340282366920938463463374607431768211455"]
    """
    if packing_size <= 0:
        raise ValidationError(f"packing_size must be positive, got {packing_size}")
    if packets is not None and packets <= 0:
        raise ValidationError(f"packets must be positive, got {packets}")

    bits_arr = split_hex_to_bits_n(hex_str, packing_size)
    dec_arr = [bin_to_dec(chunk) for chunk in bits_arr]

    target = packets if packets is not None else declared_packets(hex_str, packing_size)

    if len(dec_arr) > target:
        overflow = len(dec_arr) - target
        if not allow_truncation:
            raise PackingOverflowError(
                f"Field split into an array of {len(dec_arr)} packets: {dec_arr}, "
                f"but this exceeds the requested packet count of {target}. "
                f"Data would be lost; pass allow_truncation=True to drop the "
                f"{overflow} most-significant packet(s) deliberately."
            )
        logger.warning(
            f"Dropping {overflow} most-significant packet(s) of {hex_str} "
            f"to fit {target} packet(s) of {packing_size} bits"
        )
        return dec_arr[overflow:]

    return ["0"] * (target - len(dec_arr)) + dec_arr


def fields_to_dec(fields_arr: Sequence[str], packing_size: int) -> str:
    """
    Reassemble packed limbs into the decimal number they represent.

    Each limb is 2^packing_size times more significant than the next, so the
    first limb takes the largest shift and the last one is not shifted.

    Args:
        fields_arr: Decimal limbs, most significant first
        packing_size: Bits per limb used when the value was packed

    Returns:
        Decimal string of the reconstructed value
    """
    if packing_size <= 0:
        raise ValidationError(f"packing_size must be positive, got {packing_size}")
    if not fields_arr:
        raise ValidationError("Cannot reassemble an empty list of limbs")

    acc = 0
    limit = 1 << packing_size
    for limb in fields_arr:
        try:
            value = int(str(limb), 10)
        except ValueError:
            raise ValidationError(f"Limb {limb!r} is not a decimal integer")
        if not 0 <= value < limit:
            raise ValidationError(f"Limb {limb} does not fit in {packing_size} bits")
        acc = (acc << packing_size) + value
    return str(acc)
