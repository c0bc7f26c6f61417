"""
Error taxonomy for thing lookups.

Not-found is never an exception: readers return ``None`` for an absent node,
an excluded content type or an unmappable type hierarchy.
"""

from typing import Optional


class ThingsError(Exception):
    """Base class for all public-things errors."""


class InvalidUUIDError(ThingsError):
    """Raised when a requested identifier is not a valid UUID."""

    def __init__(self, uuid: str, reason: str):
        self.uuid = uuid
        self.reason = reason
        super().__init__(f"Invalid uuid: {uuid}, err: {reason}")


class UpstreamError(ThingsError):
    """Raised when the backing store or concepts service fails.

    Attributes:
        uuid: Identifier being resolved when the failure happened
        found: Whether a node was located before the failure
    """

    found = False

    def __init__(self, message: str, uuid: Optional[str] = None):
        self.uuid = uuid
        super().__init__(message)


class InconsistentDataError(UpstreamError):
    """Raised when more than one node claims the same identifier."""

    found = True


class BatchResolutionError(ThingsError):
    """First failure observed while resolving a batch of identifiers."""

    def __init__(self, uuid: str, cause: Exception):
        self.uuid = uuid
        self.cause = cause
        super().__init__(f"Error getting thing with uuid {uuid}, err={cause}")
