# ==============================================================================
# lms/core/errors.py - Error taxonomy for the LMS backend
# ==============================================================================

"""
Every failure the services report carries one `ErrorKind`. The routers never
build HTTP errors themselves: the handler registered in `lms.main` maps the
kind to a status code and a `{"success", "error", "message"}` body.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    PENDING_APPROVAL = "pending_approval"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_FAILED = "validation_failed"
    DEPENDENCY_FAILED = "dependency_failed"


HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.PENDING_APPROVAL: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.DEPENDENCY_FAILED: 503,
}


class LMSError(Exception):
    """Base exception class for all LMS-specific errors"""

    kind: ErrorKind = ErrorKind.DEPENDENCY_FAILED

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        body = {"success": False, "error": self.kind.value, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


# ==============================================================================
# Access errors
# ==============================================================================

class UnauthenticatedError(LMSError):
    """Raised when no valid actor could be resolved for the request"""
    kind = ErrorKind.UNAUTHENTICATED


class ForbiddenError(LMSError):
    """Raised when the actor's role or ownership does not allow the action"""
    kind = ErrorKind.FORBIDDEN


class PendingApprovalError(LMSError):
    """Raised when a student who is not approved yet touches class content"""
    kind = ErrorKind.PENDING_APPROVAL


# ==============================================================================
# Data errors
# ==============================================================================

class NotFoundError(LMSError):
    """Raised when a referenced record does not exist"""
    kind = ErrorKind.NOT_FOUND


class ConflictError(LMSError):
    """Raised when a uniqueness rule would be violated"""
    kind = ErrorKind.CONFLICT


class ValidationFailedError(LMSError):
    """Raised when a required field is missing or malformed"""
    kind = ErrorKind.VALIDATION_FAILED


class DependencyFailedError(LMSError):
    """Raised when the store, blob storage or another collaborator fails"""
    kind = ErrorKind.DEPENDENCY_FAILED


ERROR_CLASS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: UnauthenticatedError,
    ErrorKind.FORBIDDEN: ForbiddenError,
    ErrorKind.PENDING_APPROVAL: PendingApprovalError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.VALIDATION_FAILED: ValidationFailedError,
    ErrorKind.DEPENDENCY_FAILED: DependencyFailedError,
}


def error_for(kind: ErrorKind, message: str) -> LMSError:
    """Builds the exception matching a deny reason."""
    return ERROR_CLASS_BY_KIND[kind](message)


def validate_or_fail(model_cls, **data):
    """
    Builds a pydantic model from keyword data, reporting problems as a
    `ValidationFailedError` so they surface before anything is persisted.
    """
    try:
        return model_cls(**data)
    except PydanticValidationError as e:
        problems = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
        raise ValidationFailedError(problems or "Invalid data") from e
