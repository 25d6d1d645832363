"""
Witness Error Taxonomy

Every failure raised by the encoding and path-resolution code derives from
WitnessError. All of them are fatal to the call that raised them: nothing in
this package retries, re-fetches, or substitutes a different value.
"""


class WitnessError(Exception):
    """Base class for witness encoding and Merkle path errors."""
    pass


class ValidationError(WitnessError, ValueError):
    """Malformed hex, a disallowed encoding tag, or empty input."""
    pass


class LengthMismatchError(WitnessError):
    """
    A fetched node has the wrong length, or the leaf found at the expected
    tree index disagrees with the supplied commitment.
    """
    pass


class PackingOverflowError(WitnessError, OverflowError):
    """Field packing would silently drop significant limbs."""
    pass


class ConsistencyError(WitnessError):
    """
    Two computations that must agree did not: a recomputed root differs from
    the target root, or chunked hashing differs from single-round hashing.
    """
    pass


class TreeAccessError(WitnessError):
    """Exception raised for transport errors while reading the on-chain tree."""
    pass
