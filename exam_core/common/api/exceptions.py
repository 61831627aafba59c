# exam_core/common/api/exceptions.py
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from exam_core.common.exceptions import (
    AuditWriteError,
    SubmissionNotFound,
    WorkflowConflict,
    WorkflowError,
    WorkflowForbidden,
    WorkflowValidationError,
)

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope for every API failure.
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Raised when a conditional workflow update lost a race.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class AuditFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Audit trail could not be written."
    default_code = "audit_write_failed"


def to_api_exception(exc: WorkflowError) -> APIException:
    """
    Translate engine exceptions into DRF exceptions (status code + code).
    """
    if isinstance(exc, SubmissionNotFound):
        return NotFound(exc.message)
    if isinstance(exc, WorkflowForbidden):
        return PermissionDenied(exc.message)
    if isinstance(exc, WorkflowValidationError):
        return ValidationError({"detail": exc.message, "reasons": exc.messages})
    if isinstance(exc, WorkflowConflict):
        return ConflictError(exc.message)
    if isinstance(exc, AuditWriteError):
        return AuditFailure(exc.message)
    return APIException(exc.message)


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, (Http404, NotFound)):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    if isinstance(exc, WorkflowError):
        if isinstance(exc, AuditWriteError):
            logger.error("audit write failed: %s", exc, exc_info=exc)
        exc = to_api_exception(exc)

    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("unhandled API error", exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    # 1) {"detail": "..."} only -> message=detail, details=None
    # 2) {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) otherwise -> message="Request failed.", details=data
    data = response.data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        detail = data.get("detail")
        if isinstance(detail, list) and len(detail) == 1:
            detail = detail[0]
        message = str(detail)
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
