# exam_core/audit/selectors.py
from __future__ import annotations

from typing import Any
from uuid import UUID

from django.db.models import QuerySet

from exam_core.audit.models import AuditLog
from exam_core.common.exceptions import SubmissionNotFound, WorkflowValidationError
from exam_core.iam.services.directory import display_names
from exam_core.submissions.models import Submission

HISTORY_ORDERS = ("asc", "desc")


def list_audit_logs(
    *,
    submission_id: UUID,
    event_type: str | None = None,
    order: str = "asc",
) -> QuerySet[AuditLog]:
    qs = AuditLog.objects.filter(submission_id=submission_id)
    if event_type:
        qs = qs.filter(event_type=event_type)
    if order == "desc":
        return qs.order_by("-timestamp", "-id")
    return qs.order_by("timestamp", "id")


def history(*, submission_id: UUID, order: str = "asc") -> dict[str, Any]:
    """
    Timeline for one submission, oldest first unless order="desc".
    Soft-deleted submissions keep their full history; visibility of the
    submission itself is checked by the caller.
    """
    if order not in HISTORY_ORDERS:
        raise WorkflowValidationError(f"order must be one of {', '.join(HISTORY_ORDERS)}.")

    if not Submission.objects.filter(id=submission_id).exists():
        raise SubmissionNotFound()

    logs = list(list_audit_logs(submission_id=submission_id, order=order))
    names = display_names(log.user_id for log in logs)

    return {
        "submission_id": str(submission_id),
        "events": [
            {
                "timestamp": log.timestamp,
                "event_type": log.event_type,
                "user_id": log.user_id,
                "user_name": names.get(log.user_id, ""),
                "details": log.changes,
            }
            for log in logs
        ],
    }
