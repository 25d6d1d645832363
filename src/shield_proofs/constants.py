"""
Shield Tree Constants

Default sizes for the commitment tree held by the shield contract and for the
proving circuit's field packing. These are only defaults: every function that
depends on them takes the value as an explicit argument (usually through a
TreeConfig).
"""

# ====================
# Merkle Tree Shape
# ====================

# Number of levels in the tree, including the root level.
# A depth of 33 gives 2^32 leaves.
MERKLE_DEPTH = 33

# Byte length of a stored tree node (216 bits).
# Leaves and internal nodes are truncated to this length before storage.
MERKLE_HASH_LENGTH = 27

# Byte length of a commitment and of the latest root (a full SHA-256 digest).
INPUTS_HASH_LENGTH = 32

# ====================
# Circuit Packing
# ====================

# Bits per field limb when an oversized integer is packed for the circuit.
ZOKRATES_PACKING_SIZE = 128

# ====================
# Witness Encodings
# ====================

ENCODING_BITS = "bits"
ENCODING_BYTES = "bytes"
ENCODING_FIELD = "field"
ENCODING_SCALAR = "scalar"

ALLOWED_ENCODINGS = (ENCODING_BITS, ENCODING_BYTES, ENCODING_FIELD, ENCODING_SCALAR)

# ====================
# Path Resolution
# ====================

# Upper bound on concurrent sibling fetches during path resolution
FETCH_WORKERS = 8

HEX_PREFIX = "0x"
