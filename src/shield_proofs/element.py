"""
Witness Element

An Element is a value plus the encoding it should be given in the witness
vector. Different circuit parameters are encoded differently (individual
bits, bytes, packed field limbs), and one value may be spread across several
witness fields, so the encoding and packing parameters travel with the value.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .codec.hex_helpers import ensure0x, require_hex
from .constants import ALLOWED_ENCODINGS, ENCODING_FIELD, ZOKRATES_PACKING_SIZE
from .exceptions import ValidationError


@dataclass(frozen=True)
class Element:
    """
    A single witness parameter.

    Attributes:
        value: '0x'-prefixed hex of an unsigned integer (ints are accepted and converted)
        encoding: One of 'bits', 'bytes', 'field', 'scalar'
        packing_size: Bits per limb; only used by the 'field' encoding
        packets: Optional number of limbs the 'field' encoding must produce
        allow_truncation: Accept dropping most-significant limbs to fit packets
    """
    value: str
    encoding: str
    packing_size: int = ZOKRATES_PACKING_SIZE
    packets: Optional[int] = None
    allow_truncation: bool = False

    def __post_init__(self):
        if self.encoding is None:
            raise ValidationError("An encoding must be specified")
        if self.encoding not in ALLOWED_ENCODINGS:
            raise ValidationError(
                f"Element encoding must be one of {list(ALLOWED_ENCODINGS)}, got {self.encoding!r}"
            )

        value: Union[str, int] = self.value
        if value is None:
            raise ValidationError("input was undefined")
        if isinstance(value, bool):
            raise ValidationError(f"Element value must be hex or an integer, got {value!r}")
        if isinstance(value, int):
            if value < 0:
                raise ValidationError(f"Element value must be unsigned, got {value}")
            value = format(value, "x")
        if value == "" or value == "0x":
            raise ValidationError("input was empty")
        object.__setattr__(self, "value", ensure0x(require_hex(value)))

        if self.encoding == ENCODING_FIELD and not _is_positive_int(self.packing_size):
            raise ValidationError(f"packing_size must be a positive integer for field encoding, got {self.packing_size!r}")
        if self.packets is not None and not _is_positive_int(self.packets):
            raise ValidationError(f"packets must be a positive integer, got {self.packets!r}")

    @property
    def hex(self) -> str:
        """The value as '0x'-prefixed hex."""
        return self.value


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
