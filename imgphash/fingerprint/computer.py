"""
Hash computer for the fingerprint package.

Runs the DCT perceptual hash on an image file and normalizes every failure
into a HashResult. Nothing raised by Pillow or imagehash crosses this module.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..config import HASH_SIZE
from ..models import ErrorKind, HashResult
from .codec import from_image_hash
from .dependencies import Image, imagehash, _logger


def _check_readable(path: str) -> str | None:
    """Return why path cannot be hashed, or None if it is a readable file."""
    if not os.path.exists(path):
        return f"File not found: {path}"
    if not os.path.isfile(path):
        return f"Not a regular file: {path}"
    if not os.access(path, os.R_OK):
        return f"File is not readable: {path}"
    return None


def _phash_file(path: str) -> int:
    with Image.open(path) as img:
        # Force a full decode so truncated or corrupt files fail here
        img.load()

        if img.mode not in ('RGB', 'L'):
            img = img.convert('RGB')

        phash = imagehash.phash(img, hash_size=HASH_SIZE)
    return from_image_hash(phash)


def compute_result(path: str | Path) -> HashResult:
    """
    Calculate the 64-bit perceptual fingerprint of an image.

    Missing or unreadable files are rejected before the decoder is invoked.
    Any exception raised while decoding or hashing becomes a transform fault.
    No retries are attempted.

    Args:
        path: Path to the image

    Returns:
        HashResult holding either the fingerprint or the failure kind
    """
    try:
        path = os.fspath(path)
    except TypeError:
        problem = f"Not a file path: {path!r}"
        _logger.debug(problem)
        return HashResult.failure(repr(path), ErrorKind.FILE_UNAVAILABLE, problem)

    problem = _check_readable(path)
    if problem is not None:
        _logger.debug(problem)
        return HashResult.failure(path, ErrorKind.FILE_UNAVAILABLE, problem)

    try:
        fingerprint = _phash_file(path)
    except Exception as e:
        _logger.debug(f"Perceptual hash calculation failed for {path}: {e}")
        return HashResult.failure(
            path, ErrorKind.TRANSFORM_FAULT, f"{type(e).__name__}: {e}"
        )

    return HashResult.success(path, fingerprint)


def compute(path: str | Path) -> str:
    """
    Calculate the encoded fingerprint of an image.

    Returns:
        Decimal fingerprint string, or "0" on any failure
    """
    return compute_result(path).encoded


__all__ = [
    'compute',
    'compute_result',
]
