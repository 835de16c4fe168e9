"""
Error types for the Resource Proxy.

This module defines all exception types raised by the store, the
synchronizer and the peer client:
- ProxyError: Base exception
- NotFoundError: Collection or property does not exist
- AlreadyExistsError / FolderConflictError: Creation target already present
- StorageError: Durable storage read/write failure
- RemoteCallError: Peer did not respond or answered with an error
- ContractViolationError / InvalidNameError: Caller supplied inconsistent input

Invariants:
    - All errors inherit from ProxyError
    - Every error carries a stable ``reason`` and an HTTP ``status_code``
    - Errors include context for debugging in ``details``
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ProxyError(Exception):
    """Base exception for all Resource Proxy errors.

    Attributes:
        message: Error message
        code: HTTP status code used by the API layer
        reason: Stable identifier for programmatic handling
        details: Additional error context
    """

    status_code = 500
    default_reason = "ProxyError"

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = self.status_code
        self.reason = reason or self.default_reason
        self.details = details or {}

    def to_dict(self, domain: str) -> Dict[str, Any]:
        """Convert to the error body returned by the API."""
        return {
            "code": self.code,
            "domain": domain,
            "message": self.message,
            "reason": self.reason,
        }


class NotFoundError(ProxyError):
    """Referenced collection or property does not exist."""

    status_code = 404
    default_reason = "CollectionNotFoundError"

    def __init__(
        self,
        message: str,
        resource_type: str = "collection",
        resource_id: str = "",
    ) -> None:
        reason = "PropertyNotFoundError" if resource_type == "property" else None
        super().__init__(
            message,
            reason=reason,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class AlreadyExistsError(ProxyError):
    """Creation or rename target is already present."""

    status_code = 409
    default_reason = "AlreadyExistsError"

    def __init__(self, message: str, resource_id: str = "") -> None:
        super().__init__(message, details={"resource_id": resource_id})
        self.resource_id = resource_id


class FolderConflictError(AlreadyExistsError):
    """Derived collection folder name collided with an existing folder."""

    default_reason = "FolderNotCreatedError"


class StorageError(ProxyError):
    """Reading or writing a schema record failed."""

    status_code = 500
    default_reason = "StorageError"

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, details={"path": path})
        self.path = path


class RemoteCallError(ProxyError):
    """The peer store did not respond or returned an error.

    Raised when:
    - The peer is unreachable
    - The request times out
    - The peer answers with a status >= 400
    """

    status_code = 502
    default_reason = "RemoteCallError"

    def __init__(
        self,
        message: str,
        operation: str,
        peer_status: Optional[int] = None,
        peer_body: Any = None,
    ) -> None:
        super().__init__(
            message,
            details={
                "operation": operation,
                "peer_status": peer_status,
                "peer_body": peer_body,
            },
        )
        self.operation = operation
        self.peer_status = peer_status
        self.peer_body = peer_body


class ContractViolationError(ProxyError):
    """Caller supplied input the operation cannot honor."""

    status_code = 400
    default_reason = "ContractViolationError"


class InvalidNameError(ContractViolationError):
    """Collection name is empty or contains characters outside [A-Za-z0-9_-]."""

    default_reason = "InvalidNameError"

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Invalid collection name '{name}'",
            details={"name": name},
        )
        self.name = name
