"""
Error taxonomy shared by the booking, vehicle and catalog operations.

Every error carries the HTTP status it maps to at the request boundary;
the handlers registered in ``bodyshop.main`` do the translation.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidTimeFormat(ValidationError):
    default_message = "Invalid time format. Use HH:MM"


class InvalidServiceDuration(ValidationError):
    default_message = "Service duration must be a positive number of minutes"


class InvalidStatusTransition(ValidationError):
    default_message = "Invalid booking status transition"


class PermissionDenied(AppError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Resource is still referenced"


class ServerError(AppError):
    status_code = 500
