"""
Custom exceptions for the log shipper.

Destination clients raise these so the delivery coordinator can classify
failures without knowing anything about the underlying transport.
"""

from __future__ import annotations

from enum import Enum


class ShipperError(Exception):
    """Base error for the log shipper."""

    pass


class ConfigurationError(ShipperError, ValueError):
    """Invalid settings or strategies passed at construction."""

    pass


class DestinationError(ShipperError):
    """Failure reported by the destination log service.

    Attributes:
        retryable: True when the destination marked the failure as transient
        code: Optional destination error code (e.g. "ThrottlingException")
    """

    def __init__(self, message: str, *, retryable: bool = False, code: str | None = None):
        super().__init__(message)
        self.retryable = retryable
        self.code = code


class ResourceKind(str, Enum):
    """Destination resources the shipper provisions lazily."""

    GROUP = "group"
    STREAM = "stream"


class ResourceNotFoundError(DestinationError):
    """The log group or log stream does not exist."""

    def __init__(self, kind: ResourceKind, message: str | None = None):
        super().__init__(message or f"log {kind.value} not found", code="ResourceNotFound")
        self.kind = kind


class ResourceAlreadyExistsError(DestinationError):
    """A create call raced with another writer that provisioned the resource."""

    def __init__(self, kind: ResourceKind, message: str | None = None):
        super().__init__(message or f"log {kind.value} already exists", code="ResourceAlreadyExists")
        self.kind = kind


class ProvisioningError(ShipperError):
    """Destination still reports a resource missing after it was created."""

    pass
