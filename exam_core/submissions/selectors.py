# exam_core/submissions/selectors.py
from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q, QuerySet

from exam_core.common.exceptions import SubmissionNotFound, WorkflowValidationError
from exam_core.iam.identity import Actor
from exam_core.submissions.filters import SubmissionFilter
from exam_core.submissions.models import Submission, SubmissionStatus
from exam_core.submissions.policy import authorize
from exam_core.submissions.workflow import Operation

TRUTHY = {"1", "true", "True", "yes"}


def filter_submissions(qs: QuerySet[Submission], params: Mapping[str, Any]) -> QuerySet[Submission]:
    f = SubmissionFilter(data=params, queryset=qs)
    if not f.is_valid():
        raise WorkflowValidationError(
            [f"{name}: {msg}" for name, msgs in f.errors.items() for msg in msgs]
        )
    return f.qs


class SubmissionSelector:
    """
    Read-only queries for submissions, always scoped by the caller.
    No .save(), no state mutation here.
    """

    @staticmethod
    def scope_for(actor: Actor, *, include_deleted: bool = False) -> QuerySet[Submission]:
        """
        admin: everything in their clinic (soft-deleted only on request).
        others: rows they created, approved or are assigned to, across clinics.
        """
        if actor.is_admin:
            qs = Submission.objects.filter(clinic_id=actor.clinic_id)
            return qs if include_deleted else qs.filter(deleted_at__isnull=True)

        return Submission.objects.visible().filter(
            Q(created_by_id=actor.user_id)
            | Q(approved_by_id=actor.user_id)
            | Q(assigned_to_id=actor.user_id)
        )

    @staticmethod
    def list_submissions(*, actor: Actor, params: Mapping[str, Any]) -> QuerySet[Submission]:
        include_deleted = actor.is_admin and str(params.get("include_deleted", "")) in TRUTHY
        qs = SubmissionSelector.scope_for(actor, include_deleted=include_deleted)

        status = params.get("status")
        if not status:
            qs = qs.exclude(status=SubmissionStatus.DRAFT)

        qs = filter_submissions(qs, params)

        if status == SubmissionStatus.DRAFT:
            return qs.order_by("-updated_at", "-created_at")
        return qs.order_by("-created_at")

    @staticmethod
    def get_submission(*, actor: Actor, submission_id: UUID) -> Submission:
        """
        Missing, or soft-deleted for a non-admin -> SubmissionNotFound.
        Out of the caller's scope -> WorkflowForbidden.
        """
        try:
            submission = Submission.objects.get(id=submission_id)
        except (Submission.DoesNotExist, DjangoValidationError):
            raise SubmissionNotFound()
        authorize(Operation.READ, actor, submission)
        return submission

    @staticmethod
    def list_rejected_for_creator(*, actor: Actor, params: Mapping[str, Any]) -> QuerySet[Submission]:
        """
        The caller's own rejected submissions in the current clinic (nurse rework queue).
        """
        qs = Submission.objects.visible().filter(
            clinic_id=actor.clinic_id,
            status=SubmissionStatus.REJECTED,
            created_by_id=actor.user_id,
        )
        qs = filter_submissions(qs, {k: v for k, v in params.items() if k != "status"})
        return qs.order_by("-updated_at", "-created_at")
