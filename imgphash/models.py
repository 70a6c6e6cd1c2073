"""
Data models for imgphash.

Contains the result type produced by the hash computer and the job record
tracked by the job dispatcher.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .config import SENTINEL
from .errors import FileUnavailable, ImageHashError, TransformFault


class ErrorKind(Enum):
    """Why a fingerprint could not be computed."""
    FILE_UNAVAILABLE = "file_unavailable"
    TRANSFORM_FAULT = "transform_fault"


_ERROR_TYPES = {
    ErrorKind.FILE_UNAVAILABLE: FileUnavailable,
    ErrorKind.TRANSFORM_FAULT: TransformFault,
}


@dataclass(frozen=True)
class HashResult:
    """
    Outcome of hashing a single file.

    Exactly one of fingerprint and error is set. A fingerprint of 0 is a
    legitimate success; only the synchronous facade flattens failures to the
    same "0" string.

    Attributes:
        path: Path that was hashed
        fingerprint: 64-bit fingerprint on success
        error: Failure category on failure
        detail: Human-readable failure description
    """
    path: str
    fingerprint: Optional[int] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, path: str, fingerprint: int) -> 'HashResult':
        return cls(path=path, fingerprint=fingerprint)

    @classmethod
    def failure(cls, path: str, error: ErrorKind, detail: str) -> 'HashResult':
        return cls(path=path, error=error, detail=detail)

    @classmethod
    def from_completion(
        cls, path: str, error: Optional[ImageHashError], encoded: str
    ) -> 'HashResult':
        """Rebuild a result from the (error, encoded) pair given to a completion handler."""
        if error is None:
            from .fingerprint.codec import decode_strict
            return cls.success(path, decode_strict(encoded))
        kind = (
            ErrorKind.FILE_UNAVAILABLE
            if isinstance(error, FileUnavailable)
            else ErrorKind.TRANSFORM_FAULT
        )
        return cls.failure(path, kind, str(error))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def encoded(self) -> str:
        """Decimal string form, or the sentinel on failure."""
        if not self.ok:
            return SENTINEL
        from .fingerprint.codec import encode
        return encode(self.fingerprint)

    def exception(self) -> Optional[ImageHashError]:
        """Build the exception matching this failure, or None on success."""
        if self.ok:
            return None
        return _ERROR_TYPES[self.error](self.detail or self.error.value, path=self.path)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'path': self.path,
            'fingerprint': self.encoded,
            'error': self.error.value if self.error else None,
            'detail': self.detail,
        }


class JobState(Enum):
    """Lifecycle of an asynchronous hashing job. There is no cancelled state."""
    CREATED = "created"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class Job:
    """
    A single asynchronous hashing request.

    Owned by the dispatcher from creation until its handler has been invoked,
    and only ever touched on the caller's event loop thread.

    Attributes:
        id: Dispatcher-assigned identifier
        path: File to hash
        handler: Completion handler, called once as handler(error, encoded)
        state: Current lifecycle state
        result: Hash result once completed
    """
    id: int
    path: str
    handler: Callable[[Optional[ImageHashError], str], Any]
    state: JobState = JobState.CREATED
    result: Optional[HashResult] = None
