"""
Fingerprint package for imgphash.

Computes 64-bit DCT perceptual fingerprints, carries them as decimal strings,
and compares them by Hamming distance.

Public API:
- encode / decode / decode_strict: Convert between int and decimal string
- to_bytes / from_bytes: Fixed 8-byte binary form
- compute / compute_result: Hash a file, never raising
- hamming_distance / is_similar: Compare encoded fingerprints
- JobDispatcher / get_dispatcher: Hash on worker threads, report on the event loop
- image_hash_sync / image_hash: Blocking and non-blocking entry points
- hash_files: Hash many files in parallel
- old_hash / imagehash: Deprecated entry points
- has_heif_support: Check if HEIC/HEIF support is available
"""

from __future__ import annotations

from .codec import (
    encode,
    decode,
    decode_strict,
    to_bytes,
    from_bytes,
    from_image_hash,
)
from .computer import compute, compute_result
from .distance import hamming_distance, is_similar
from .dispatcher import CompletionHandler, JobDispatcher, get_dispatcher
from .facade import image_hash_sync, image_hash, old_hash, imagehash
from .batch import hash_files

from .dependencies import HAS_HEIF_SUPPORT


def has_heif_support() -> bool:
    """Check if HEIC/HEIF support is available."""
    return HAS_HEIF_SUPPORT


__all__ = [
    # Codec
    'encode',
    'decode',
    'decode_strict',
    'to_bytes',
    'from_bytes',
    'from_image_hash',
    # Hash computer
    'compute',
    'compute_result',
    # Distance
    'hamming_distance',
    'is_similar',
    # Dispatch
    'CompletionHandler',
    'JobDispatcher',
    'get_dispatcher',
    # Entry points
    'image_hash_sync',
    'image_hash',
    'old_hash',
    'imagehash',
    'hash_files',
    # Feature detection
    'has_heif_support',
]
