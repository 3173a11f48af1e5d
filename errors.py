from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response"""
    status_code = 500
    code = "internal_error"
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class ValidationError(AppError):
    """Malformed or missing input fields"""
    status_code = 400
    code = "validation_error"
    message = "Validation failed"


class AuthenticationError(AppError):
    """Missing, invalid or expired token"""
    status_code = 401
    code = "unauthorized"
    message = "Unauthorized"


class NotFoundError(AppError):
    """Resource absent or not owned by the caller"""
    status_code = 404
    code = "not_found"
    message = "Not found"


class ConflictError(AppError):
    """Duplicate email at registration"""
    status_code = 400
    code = "conflict"
    message = "User with this email already exists"


class InternalError(AppError):
    """Unexpected store or runtime failure"""
