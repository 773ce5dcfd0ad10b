# practice/exceptions.py
"""
Error taxonomy for the practice subsystem.

Every recoverable error is an ``APIException`` with a stable ``default_code``
so clients branch on the code rather than on the message text. The API
renders them as ``{"code": ..., "detail": ..., "field": ...}``.

``FatalInvariantError`` is deliberately *not* an API exception: it means the
system broke one of its own guarantees (e.g. a user without a statistics
row) and must surface as a server error.
"""
from __future__ import annotations

from typing import Optional

from rest_framework import exceptions, status
from rest_framework.views import exception_handler


class PracticeError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Practice request failed."
    default_code = "practice_error"

    def __init__(self, detail=None, code=None, field: Optional[str] = None):
        super().__init__(detail=detail, code=code)
        self.field = field


class ValidationError(PracticeError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "validation_error"


class NotFoundError(PracticeError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."
    default_code = "not_found"


class ForbiddenError(PracticeError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to access this resource."
    default_code = "forbidden"


class ConflictError(PracticeError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting request."
    default_code = "conflict"


class InvalidStateError(PracticeError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current session state."
    default_code = "invalid_state"


class FatalInvariantError(RuntimeError):
    """A guarantee the system itself provides was found broken."""


_STATUS_CODES = {
    status.HTTP_401_UNAUTHORIZED: "not_authenticated",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
}


def api_exception_handler(exc, context):
    """DRF exception handler that adds a machine-readable ``code`` to every error body."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "code": "validation_error",
            "detail": "Invalid input.",
            "errors": exc.detail,
        }
        return response

    detail = getattr(exc, "detail", None)
    if isinstance(detail, exceptions.ErrorDetail):
        code = detail.code
    else:
        code = getattr(exc, "default_code", None) or _STATUS_CODES.get(response.status_code, "error")

    body = {"code": code, "detail": str(detail) if detail is not None else response.data.get("detail")}
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    response.data = body
    return response
