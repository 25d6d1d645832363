"""
Codec Utilities

This package converts domain values between hex, binary, decimal and
field-limb representations:

- hex_helpers: '0x' prefix handling, padding, truncation and validation
- conversions: arbitrary-precision base conversion on digit arrays
- packing: fixed-width big-endian chunking of oversized integers into field limbs
"""

from .hex_helpers import (
    strip0x,
    ensure0x,
    is_hex,
    require_hex,
    normalize_hex,
    hex_byte_length,
    left_pad_hex,
    pad_hex,
    truncate_hex,
    utf8_string_to_hex,
    hex_to_utf8_string,
    rnd_hex,
)

from .conversions import (
    parse_to_digits_array,
    add_digits,
    multiply_by_number,
    convert_base,
    hex_to_dec,
    hex_to_bin,
    hex_to_bin_simple,
    hex_to_bytes,
    hex_to_field,
    bin_to_dec,
    bin_to_hex,
    dec_to_hex,
    dec_to_bin,
)

from .packing import (
    left_pad_bits_n,
    split_and_pad_bits_n,
    split_hex_to_bits_n,
    split_dec_to_bits_n,
    declared_packets,
    hex_to_field_preserve,
    fields_to_dec,
)

__all__ = [
    # Hex helpers
    'strip0x',
    'ensure0x',
    'is_hex',
    'require_hex',
    'normalize_hex',
    'hex_byte_length',
    'left_pad_hex',
    'pad_hex',
    'truncate_hex',
    'utf8_string_to_hex',
    'hex_to_utf8_string',
    'rnd_hex',
    # Base conversions
    'parse_to_digits_array',
    'add_digits',
    'multiply_by_number',
    'convert_base',
    'hex_to_dec',
    'hex_to_bin',
    'hex_to_bin_simple',
    'hex_to_bytes',
    'hex_to_field',
    'bin_to_dec',
    'bin_to_hex',
    'dec_to_hex',
    'dec_to_bin',
    # Packing
    'left_pad_bits_n',
    'split_and_pad_bits_n',
    'split_hex_to_bits_n',
    'split_dec_to_bits_n',
    'declared_packets',
    'hex_to_field_preserve',
    'fields_to_dec',
]
