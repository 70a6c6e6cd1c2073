"""
Distance calculation between encoded fingerprints.
"""

from __future__ import annotations

from typing import Optional

from ..config import FINGERPRINT_BITS
from ..user_config import get_user_config
from .codec import decode


def hamming_distance(a: str, b: str) -> int:
    """
    Count the differing bits between two encoded fingerprints.

    Malformed strings decode to 0 rather than raising, so this never fails;
    a malformed string compared with "0" yields a distance of 0.

    Returns:
        Number of differing bits, 0-64 (0 = identical)
    """
    return bin(decode(a) ^ decode(b)).count('1')


def is_similar(a: str, b: str, threshold: Optional[int] = None) -> bool:
    """
    Check whether two encoded fingerprints are within a Hamming threshold.

    Args:
        a: First encoded fingerprint
        b: Second encoded fingerprint
        threshold: Maximum distance to consider similar (default from user config)

    Raises:
        ValueError: If threshold is outside 0-64
    """
    if threshold is None:
        threshold = get_user_config().default_threshold
    if not 0 <= threshold <= FINGERPRINT_BITS:
        raise ValueError(f"Threshold must be between 0 and {FINGERPRINT_BITS}, got {threshold}")
    return hamming_distance(a, b) <= threshold


__all__ = ['hamming_distance', 'is_similar']
