# exam_core/approvals/selectors.py
from __future__ import annotations

from typing import Any, Mapping

from django.db.models import Q, QuerySet

from exam_core.common.exceptions import WorkflowForbidden
from exam_core.iam.identity import Actor
from exam_core.submissions.models import Submission, SubmissionStatus
from exam_core.submissions.selectors import filter_submissions


def _without_status(params: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if k != "status"}


def _require_reviewer(actor: Actor) -> None:
    if not (actor.is_doctor or actor.is_admin):
        raise WorkflowForbidden("Only doctors can view the approval queue.")


def list_pending_approvals(*, actor: Actor, params: Mapping[str, Any]) -> QuerySet[Submission]:
    """
    Doctor's queue: pending_approval in the current clinic, routed to this
    doctor or to nobody in particular. Admins see the whole clinic queue.
    """
    _require_reviewer(actor)

    qs = Submission.objects.visible().filter(
        clinic_id=actor.clinic_id,
        status=SubmissionStatus.PENDING_APPROVAL,
    )
    if not actor.is_admin:
        qs = qs.filter(Q(assigned_doctor_id=actor.user_id) | Q(assigned_doctor_id__isnull=True))

    qs = filter_submissions(qs, _without_status(params))
    return qs.order_by("-created_at")


def list_rejected_by_doctor(*, actor: Actor, params: Mapping[str, Any]) -> QuerySet[Submission]:
    """
    Rejections this doctor made or was routed, plus drafts reopened from
    one of their rejections (rejected_reason survives reopen).
    """
    _require_reviewer(actor)

    rejected = Q(status=SubmissionStatus.REJECTED) & (
        Q(assigned_doctor_id=actor.user_id) | Q(approved_by_id=actor.user_id)
    )
    reopened = (
        Q(status=SubmissionStatus.DRAFT)
        & Q(rejected_reason__isnull=False)
        & Q(approved_by_id=actor.user_id)
    )
    qs = Submission.objects.visible().filter(clinic_id=actor.clinic_id).filter(rejected | reopened)

    qs = filter_submissions(qs, _without_status(params))
    return qs.order_by("-created_at")
