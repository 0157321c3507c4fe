"""Domain errors raised by the registry and directory services.

Each error carries the HTTP status and a stable ``error_code`` so callers can
tell the categories apart without parsing messages.
"""

from fastapi import status


class DeviceConsoleError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(DeviceConsoleError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ConflictError(DeviceConsoleError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"


class ForbiddenError(DeviceConsoleError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"


class InvariantViolationError(DeviceConsoleError):
    """Raised when a mutation would break the bootstrap-account protection."""

    status_code = 422
    error_code = "invariant_violation"


class ValidationFailedError(DeviceConsoleError):
    status_code = 422
    error_code = "validation_error"


class UnauthorizedError(DeviceConsoleError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"


class TransportError(DeviceConsoleError):
    """The backing store could not be reached or failed mid-operation."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "transport_error"
