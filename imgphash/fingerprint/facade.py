"""
Public hashing entry points.

image_hash_sync() blocks and flattens every failure to "0" without an error
signal. image_hash() runs on the shared dispatcher and reports failures to its
handler. The remaining functions are deprecated and kept for callers of the
older API.
"""

from __future__ import annotations

import warnings
from pathlib import Path

from ..config import LEGACY_MASK
from .computer import compute, compute_result
from .dispatcher import CompletionHandler, get_dispatcher


def image_hash_sync(path: str | Path) -> str:
    """
    Hash an image on the calling thread.

    A "0" result is ambiguous: the file may be missing, undecodable, or
    (rarely) genuinely hash to zero. Use image_hash() to tell them apart.

    Returns:
        Decimal fingerprint string, or "0" on any failure
    """
    return compute(path)


def image_hash(path: str | Path, handler: CompletionHandler) -> None:
    """
    Hash an image on a worker thread without blocking the running event loop.

    handler(error, encoded) is called exactly once on the loop's thread. error
    is None on success, otherwise FileUnavailable or TransformFault; encoded
    is "0" on failure.

    Raises:
        InvalidArgument: If handler is missing or not callable
        RuntimeError: If called outside a running event loop
    """
    get_dispatcher().submit(path, handler)


def old_hash(path: str | Path) -> int:
    """
    Deprecated: return the fingerprint truncated to its low 32 bits.

    The upper 32 bits are lost, so values from different images can collide.
    Returns 0 on any failure. Use image_hash_sync() instead.
    """
    warnings.warn(
        "old_hash() returns a lossy 32-bit fingerprint and is deprecated; "
        "use image_hash_sync() instead",
        DeprecationWarning,
        stacklevel=2,
    )
    result = compute_result(path)
    if not result.ok:
        return 0
    return result.fingerprint & LEGACY_MASK


def imagehash(path: str | Path) -> str:
    """Deprecated alias of image_hash_sync()."""
    warnings.warn(
        "imagehash() is deprecated; use image_hash_sync() instead",
        DeprecationWarning,
        stacklevel=2,
    )
    return compute(path)


__all__ = ['image_hash_sync', 'image_hash', 'old_hash', 'imagehash']
