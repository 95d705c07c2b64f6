"""
Error taxonomy shared by the API and the client.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base exception for all handled application errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors or []
        super().__init__(self.message)


class ValidationFailed(AppError):
    """Client-correctable input error with field-level messages."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", errors=None):
        super().__init__(message, errors=errors)


class AuthenticationError(AppError):
    status_code = 401

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, resource: str = "Resource", message: Optional[str] = None):
        super().__init__(message or f"{resource} not found")


class ConflictError(AppError):
    """Raised on a uniqueness violation (duplicate attendance, minutes, e-mail)."""

    status_code = 409


class ServerError(AppError):
    status_code = 500


class NetworkError(AppError):
    """The API could not be reached at all (client side only)."""

    status_code = 503


_BY_STATUS = {
    400: ValidationFailed,
    401: AuthenticationError,
    403: ForbiddenError,
    409: ConflictError,
}


def error_from_response(status_code: int, payload: Dict[str, Any]) -> AppError:
    """Rebuild the matching exception from an error envelope."""
    message = payload.get("message") or payload.get("error") or f"HTTP {status_code}"
    if status_code == 404:
        return NotFoundError(message=message)
    cls = _BY_STATUS.get(status_code)
    if cls is ValidationFailed:
        return ValidationFailed(message, errors=payload.get("errors"))
    if cls is not None:
        return cls(message)
    return ServerError(message, status_code=status_code)
