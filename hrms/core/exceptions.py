# hrms/core/exceptions.py
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class HRMSError(HTTPException):
    """Base error: carries an HTTP status plus extra JSON context for the body"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(
        self,
        detail: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        **context: Any
    ):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )
        self.context = context


class ValidationError(HRMSError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request data"


class DuplicateFieldError(ValidationError):
    """Email/phone/subdomain collision. `field` is echoed as duplicateField."""

    def __init__(self, field: str, detail: Optional[str] = None):
        super().__init__(
            detail or f"{field.capitalize()} already registered",
            duplicateField=field,
        )
        self.field = field


class PlanLimitExceededError(HRMSError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Employee count exceeds the plan limit"

    def __init__(self, max_employees: int, requested: int, detail: Optional[str] = None):
        super().__init__(
            detail or f"Plan allows at most {max_employees} employees, requested {requested}",
            maxEmployees=max_employees,
            requested=requested,
        )


class UnauthorizedError(HRMSError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(HRMSError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not enough permissions"


class NotFoundError(HRMSError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class InvalidStateError(HRMSError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current state"


class RegistrationExpiredError(HRMSError):
    status_code = status.HTTP_410_GONE
    default_detail = "Registration session expired"
