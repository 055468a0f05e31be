"""bountyhook exception hierarchy.

Provides structured exceptions for error handling throughout the codebase.
All exceptions inherit from BountyHookError for easy catching.
"""

from __future__ import annotations


class BountyHookError(Exception):
    """Base exception for all bountyhook errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code for API responses.
    """

    code: str = "bountyhook_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class ValidationError(BountyHookError):
    """Invalid input provided.

    Raised when a webhook registration or update fails validation.

    Attributes:
        field: The field that failed validation.
        message: Description of the validation failure.
    """

    code: str = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "field": self.field,
                "message": self.message,
            }
        }


class NotFoundError(BountyHookError):
    """Resource not found.

    Attributes:
        resource_type: Type of resource (e.g., "webhook").
        resource_id: ID of the missing resource.
    """

    code: str = "not_found"

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found: {resource_id}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "resource_type": self.resource_type,
                "resource_id": self.resource_id,
                "message": self.message,
            }
        }


class FetchError(BountyHookError):
    """Upstream bounty feed could not be read.

    Raised on transport failures, non-2xx responses and malformed bodies.
    A poll cycle that hits this error is abandoned without touching state.

    Attributes:
        status_code: HTTP status of the upstream response, if one was received.
    """

    code: str = "fetch_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DeliveryError(BountyHookError):
    """A single webhook delivery attempt failed.

    Attributes:
        status_code: HTTP status returned by the subscriber, None for
            transport-level failures.
    """

    code: str = "delivery_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PersistenceError(BountyHookError):
    """Writing state to durable storage failed."""

    code: str = "persistence_error"

