"""
Witness Vector Encoding

Turns an ordered sequence of Elements into the flat sequence of decimal
strings that is handed to the circuit's witness computation.

The output order is the concatenation, in input order, of each element's
expansion. The circuit's argument order depends on it, so elements are never
reordered or deduplicated.
"""

import logging
from typing import Iterable, List

from .codec.conversions import hex_to_bin, hex_to_bytes, hex_to_dec
from .codec.packing import hex_to_field_preserve
from .constants import ENCODING_BITS, ENCODING_BYTES, ENCODING_FIELD, ENCODING_SCALAR
from .element import Element
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


def encode_element(element: Element) -> List[str]:
    """
    Expand a single element according to its encoding.

    - bits: every bit of the full-width binary form, one entry per bit
    - bytes: the decimal value of each byte, left to right
    - field: decimal limbs of packing_size bits, most significant first
    - scalar: the decimal value as a single entry

    Raises:
        ValidationError: If the encoding is not recognised
        PackingOverflowError: If a field value does not fit its packets
    """
    encoding = element.encoding
    if encoding == ENCODING_BITS:
        return list(hex_to_bin(element.value))
    if encoding == ENCODING_BYTES:
        return hex_to_bytes(element.value)
    if encoding == ENCODING_FIELD:
        # every limb must stay below the BN128 field order (~2^254)
        return hex_to_field_preserve(
            element.value,
            element.packing_size,
            element.packets,
            allow_truncation=element.allow_truncation,
        )
    if encoding == ENCODING_SCALAR:
        return [hex_to_dec(element.value)]
    raise ValidationError("Encoding type not recognised")


def compute_vectors(elements: Iterable[Element]) -> List[str]:
    """
    Compute the witness vector for a sequence of elements.

    Args:
        elements: Elements in the order the circuit expects its arguments

    Returns:
        Flat list of decimal strings

    Examples:
        >>> compute_vectors([Element("0xff00", "bytes")])
        ["255", "0"]
        >>> compute_vectors([Element("0x0f", "bits")])
        ["0", "0", "0", "0", "1", "1", "1", "1"]
    """
    vector: List[str] = []
    count = 0
    for element in elements:
        if not isinstance(element, Element):
            raise ValidationError(f"Expected an Element, got {type(element).__name__}")
        vector.extend(encode_element(element))
        count += 1
    logger.debug(f"Encoded {count} elements into a witness vector of {len(vector)} entries")
    return vector
