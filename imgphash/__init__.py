"""
imgphash
========
Perceptual image fingerprints for near-duplicate detection.

Features:
- 64-bit DCT perceptual hash (pHash) per image
- Fingerprints carried as decimal strings, safe for 32-bit numeric consumers
- Hamming distance comparison
- Non-blocking hashing on a worker pool for asyncio callers
- Failures reported as values, never raised out of the hashing path
- CLI for hashing and comparing files

Author: Zach
"""

__version__ = "1.0.0"
__author__ = "Zedidence"

from .config import SENTINEL, FINGERPRINT_BITS, DEFAULT_THRESHOLD
from .errors import (
    ImageHashError,
    FileUnavailable,
    TransformFault,
    MalformedFingerprint,
    InvalidArgument,
)
from .models import HashResult, ErrorKind, Job, JobState
from .fingerprint import (
    encode,
    decode,
    decode_strict,
    compute_result,
    hamming_distance,
    is_similar,
    JobDispatcher,
    image_hash_sync,
    image_hash,
    hash_files,
    old_hash,
    imagehash,
)
from .user_config import UserConfig, get_user_config

__all__ = [
    "SENTINEL",
    "FINGERPRINT_BITS",
    "DEFAULT_THRESHOLD",
    "ImageHashError",
    "FileUnavailable",
    "TransformFault",
    "MalformedFingerprint",
    "InvalidArgument",
    "HashResult",
    "ErrorKind",
    "Job",
    "JobState",
    "encode",
    "decode",
    "decode_strict",
    "compute_result",
    "hamming_distance",
    "is_similar",
    "JobDispatcher",
    "image_hash_sync",
    "image_hash",
    "hash_files",
    "old_hash",
    "imagehash",
    "UserConfig",
    "get_user_config",
]
