"""Application error hierarchy.

Validation failures and missing rows are raised as exceptions and
translated to HTTP responses at the API boundary. Business-rule
rejections (insufficient funds) are not errors; see ``outcomes``.
"""

from typing import Any, Dict


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationFailure(AppError):
    """User input is malformed; nothing was written.

    Carries field-level messages so forms can render them inline.
    """

    def __init__(self, field_errors: Dict[str, str], message: str = "Validation failed"):
        super().__init__(message, "validation_failed", 422)
        self.field_errors = field_errors

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "field_errors": self.field_errors}


class InvalidTypeError(ValidationFailure):
    """A line item names a type id the organization cannot see.

    Usually a tampered or stale client payload.
    """

    def __init__(self, type_id: int, field: str = "type_id"):
        super().__init__(
            {field: f"Invalid transaction item typeId: {type_id}"},
            message=f"Invalid transaction item typeId: {type_id}",
        )
        self.type_id = type_id


class NotFoundError(AppError):
    """Entity does not exist inside the caller's organization."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found", "not_found", 404)
        self.entity = entity
        self.entity_id = entity_id


class InvalidStatusTransitionError(AppError):
    """Requested reimbursement status change is not a legal transition."""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move a {current} request to {target}",
            "invalid_transition",
            409,
        )
        self.current = current
        self.target = target


class UnauthorizedError(AppError):
    """Caller identity is missing or unknown."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "unauthorized", 401)


class ForbiddenError(AppError):
    """Caller is known but lacks the required role."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, "forbidden", 403)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {"error": error.to_dict()}


__all__ = [
    "AppError",
    "ValidationFailure",
    "InvalidTypeError",
    "NotFoundError",
    "InvalidStatusTransitionError",
    "UnauthorizedError",
    "ForbiddenError",
    "error_response",
]
