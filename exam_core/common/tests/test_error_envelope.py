import pytest
from rest_framework.test import APIRequestFactory

from exam_core.common.api.exceptions import api_exception_handler
from exam_core.common.exceptions import (
    AuditWriteError,
    SubmissionNotFound,
    WorkflowConflict,
    WorkflowForbidden,
    WorkflowValidationError,
)


def render(exc):
    request = APIRequestFactory().get("/api/v1/submissions/")
    return api_exception_handler(exc, {"request": request})


@pytest.mark.parametrize(
    "exc,status,code",
    [
        (SubmissionNotFound(), 404, "not_found"),
        (WorkflowForbidden("Only doctors can approve submissions."), 403, "permission_denied"),
        (WorkflowValidationError(["a", "b"]), 400, "validation_error"),
        (WorkflowConflict(), 409, "conflict"),
        (AuditWriteError(), 500, "audit_write_failed"),
    ],
)
def test_workflow_errors_map_to_envelope(exc, status, code):
    res = render(exc)
    assert res.status_code == status
    err = res.data["error"]
    assert err["code"] == code
    assert err["message"] == exc.message
    assert err["request_id"]


def test_validation_reasons_are_kept_in_details():
    res = render(WorkflowValidationError(["form_data: must be an object.", "exam_type: unknown."]))
    assert res.data["error"]["details"]["reasons"] == [
        "form_data: must be an object.",
        "exam_type: unknown.",
    ]


def test_unhandled_error_is_a_500_envelope():
    res = render(RuntimeError("boom"))
    assert res.status_code == 500
    assert res.data["error"]["code"] == "server_error"
    assert res.data["error"]["message"] == "Unexpected server error."
