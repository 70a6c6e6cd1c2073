"""
Exception types for imgphash.

FileUnavailable and TransformFault never escape the hash computer as raised
exceptions; they are folded into a HashResult and only handed to completion
handlers as values. MalformedFingerprint is raised by strict decoding and
InvalidArgument by the job dispatcher.
"""

from __future__ import annotations

from typing import Optional


class ImageHashError(Exception):
    """Base class for all imgphash errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class FileUnavailable(ImageHashError):
    """The image file is missing, not a regular file, or not readable."""


class TransformFault(ImageHashError):
    """Decoding or hashing the image raised an error."""


class MalformedFingerprint(ImageHashError, ValueError):
    """An encoded fingerprint is not a valid unsigned 64-bit decimal."""


class InvalidArgument(ImageHashError, TypeError):
    """A required argument, such as a completion handler, is missing or invalid."""


__all__ = [
    'ImageHashError',
    'FileUnavailable',
    'TransformFault',
    'MalformedFingerprint',
    'InvalidArgument',
]
