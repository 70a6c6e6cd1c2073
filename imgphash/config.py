"""
Configuration constants for imgphash.

This module contains the fixed parameters of the fingerprint format and the
defaults for everything users may override through user_config.
"""

# Fingerprint format
# pHash with an 8x8 DCT block yields exactly 64 bits
HASH_SIZE = 8
FINGERPRINT_BITS = HASH_SIZE * HASH_SIZE
FINGERPRINT_MAX = (1 << FINGERPRINT_BITS) - 1
FINGERPRINT_BYTES = FINGERPRINT_BITS // 8

# Encoded value returned when no usable fingerprint could be computed
SENTINEL = "0"

# Width of the deprecated numeric fingerprint
LEGACY_BITS = 32
LEGACY_MASK = (1 << LEGACY_BITS) - 1

# Default similarity threshold for Hamming distance
# Lower = stricter matching (0-64 range)
# Recommended: 5-15
DEFAULT_THRESHOLD = 10

# Default number of worker threads for asynchronous hashing
DEFAULT_WORKERS = 4

# PIL decompression bomb limit
# Default is ~89MP, raised to 500MP for high-resolution scans and panoramas
MAX_IMAGE_PIXELS = 500_000_000
