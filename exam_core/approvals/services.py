# exam_core/approvals/services.py
from __future__ import annotations

from uuid import UUID

from django.db import transaction
from django.utils import timezone

from exam_core.audit import changes as audit_changes
from exam_core.audit.services import AuditService
from exam_core.common.exceptions import WorkflowValidationError
from exam_core.iam.identity import Actor
from exam_core.submissions.models import Submission, agency_for
from exam_core.submissions.policy import authorize
from exam_core.submissions.services import apply_transition, load_submission
from exam_core.submissions.validation import validate_content
from exam_core.submissions.workflow import REJECTED, SUBMITTED, Operation


class ApprovalService:
    """
    Doctor review of pending_approval submissions.
    Both operations require a doctor acting in the submission's clinic.
    """

    @staticmethod
    @transaction.atomic
    def approve(*, actor: Actor, submission_id: UUID, notes: str = "") -> Submission:
        submission = load_submission(submission_id)
        authorize(Operation.APPROVE, actor, submission)
        validate_content(submission.exam_type, submission.form_data)

        ts = timezone.now()
        submission = apply_transition(
            submission,
            operation=Operation.APPROVE,
            target=SUBMITTED,
            actor=actor,
            approved_by_id=actor.user_id,
            approved_date=ts,
            submitted_date=ts,
            last_reviewed_by_id=actor.user_id,
            last_reviewed_at=ts,
        )

        AuditService.record(
            submission_id=submission.id,
            user_id=actor.user_id,
            changes=audit_changes.Approved(notes=notes or ""),
        )
        AuditService.record(
            submission_id=submission.id,
            user_id=actor.user_id,
            changes=audit_changes.Submitted(status=SUBMITTED, agency=agency_for(submission.exam_type)),
        )
        return submission

    @staticmethod
    @transaction.atomic
    def reject(*, actor: Actor, submission_id: UUID, reason: str) -> Submission:
        """
        pending_approval -> rejected. approved_by_id records the rejecter
        (kept for compatibility); last_reviewed_by_id says the same thing
        without the overload.
        """
        submission = load_submission(submission_id)
        authorize(Operation.REJECT, actor, submission)

        reason = (reason or "").strip()
        if not reason:
            raise WorkflowValidationError("A rejection reason is required.")

        ts = timezone.now()
        submission = apply_transition(
            submission,
            operation=Operation.REJECT,
            target=REJECTED,
            actor=actor,
            rejected_reason=reason,
            approved_by_id=actor.user_id,
            approved_date=ts,
            last_reviewed_by_id=actor.user_id,
            last_reviewed_at=ts,
        )

        AuditService.record(
            submission_id=submission.id,
            user_id=actor.user_id,
            changes=audit_changes.Rejected(reason=reason),
        )
        return submission
