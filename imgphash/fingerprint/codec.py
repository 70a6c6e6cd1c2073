"""
Fingerprint codec.

Fingerprints are unsigned 64-bit integers internally and decimal strings at
every public boundary, so that callers whose numeric type is narrower than 64
bits (JSON consumers, JavaScript, 32-bit columns) never truncate them.
"""

from __future__ import annotations

import re

from ..config import FINGERPRINT_BITS, FINGERPRINT_BYTES, FINGERPRINT_MAX
from ..errors import MalformedFingerprint
from .dependencies import np, _logger

# ASCII digits only; str.isdigit() would also accept superscripts and other scripts
_DECIMAL_RE = re.compile(r'[0-9]+')
_MAX_DIGITS = len(str(FINGERPRINT_MAX))


def _check_range(fingerprint: int) -> None:
    if isinstance(fingerprint, bool) or not isinstance(fingerprint, int):
        raise ValueError(f"Fingerprint must be an int, got {type(fingerprint).__name__}")
    if not 0 <= fingerprint <= FINGERPRINT_MAX:
        raise ValueError(f"Fingerprint {fingerprint} is outside the unsigned {FINGERPRINT_BITS}-bit range")


def encode(fingerprint: int) -> str:
    """
    Render a fingerprint as a base-10 string.

    No sign, no grouping, no leading zeros except for the value zero itself.

    Raises:
        ValueError: If the value is not an unsigned 64-bit integer
    """
    _check_range(fingerprint)
    return str(fingerprint)


def decode_strict(encoded: str) -> int:
    """
    Parse a base-10 fingerprint string.

    Leading zeros are accepted. Signs, whitespace and any other character are not.

    Raises:
        MalformedFingerprint: On empty input, non-digit characters or overflow
    """
    if not isinstance(encoded, str):
        raise MalformedFingerprint(f"Expected a decimal string, got {type(encoded).__name__}")
    if not _DECIMAL_RE.fullmatch(encoded):
        raise MalformedFingerprint(f"Not a decimal fingerprint: {encoded!r}")
    # int() refuses very long digit strings on newer interpreters
    digits = encoded.lstrip('0') or '0'
    if len(digits) > _MAX_DIGITS:
        raise MalformedFingerprint(f"Fingerprint overflows {FINGERPRINT_BITS} bits: {encoded[:32]!r}...")
    value = int(digits)
    if value > FINGERPRINT_MAX:
        raise MalformedFingerprint(f"Fingerprint overflows {FINGERPRINT_BITS} bits: {encoded!r}")
    return value


def decode(encoded: str) -> int:
    """
    Parse a base-10 fingerprint string, mapping malformed input to 0.

    This permissive policy keeps the comparison path total. Use
    decode_strict() to reject malformed strings instead.
    """
    try:
        return decode_strict(encoded)
    except MalformedFingerprint as e:
        _logger.debug(f"Treating malformed fingerprint as 0: {e}")
        return 0


def to_bytes(fingerprint: int) -> bytes:
    """Fixed-width big-endian binary form (8 bytes)."""
    _check_range(fingerprint)
    return fingerprint.to_bytes(FINGERPRINT_BYTES, 'big')


def from_bytes(data: bytes) -> int:
    """
    Inverse of to_bytes().

    Raises:
        MalformedFingerprint: If data is not exactly 8 bytes
    """
    if len(data) != FINGERPRINT_BYTES:
        raise MalformedFingerprint(
            f"Binary fingerprint must be {FINGERPRINT_BYTES} bytes, got {len(data)}"
        )
    return int.from_bytes(data, 'big')


def from_image_hash(image_hash) -> int:
    """
    Pack an imagehash.ImageHash into an integer.

    Bits are taken row by row, first bit most significant, which matches the
    bit order of the library's hex rendering.
    """
    bits = np.asarray(image_hash.hash, dtype=bool).flatten()
    if bits.size != FINGERPRINT_BITS:
        raise ValueError(f"Expected a {FINGERPRINT_BITS}-bit hash, got {bits.size} bits")
    return int.from_bytes(np.packbits(bits).tobytes(), 'big')


__all__ = [
    'encode',
    'decode',
    'decode_strict',
    'to_bytes',
    'from_bytes',
    'from_image_hash',
]
