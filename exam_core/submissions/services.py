# exam_core/submissions/services.py
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from exam_core.audit import changes as audit_changes
from exam_core.audit.services import AuditService
from exam_core.common.exceptions import (
    SubmissionNotFound,
    WorkflowConflict,
    WorkflowValidationError,
)
from exam_core.iam.identity import Actor
from exam_core.iam.models import StaffRole
from exam_core.iam.services.directory import StaffMember, get_staff_member, is_member_of_clinic
from exam_core.submissions.models import ExamType, Submission, agency_for
from exam_core.submissions.policy import authorize
from exam_core.submissions.validation import validate_content
from exam_core.submissions.workflow import (
    DRAFT,
    IN_PROGRESS,
    PENDING_APPROVAL,
    SUBMITTED,
    Operation,
    convert_to_draft_for_doctor_edit,
    initial_status,
    require_transition,
)

logger = logging.getLogger(__name__)

PATIENT_FIELDS = (
    "patient_name",
    "patient_identifier",
    "patient_passport_no",
    "patient_date_of_birth",
    "patient_email",
    "patient_mobile",
    "examination_date",
)
EDITABLE_FIELDS = ("exam_type", "form_data", "assigned_doctor_id") + PATIENT_FIELDS
REQUIRED_ON_CREATE = ("exam_type", "patient_name", "patient_identifier")


# ---------------------------------------------------------------------
# Shared write-path helpers (also used by ApprovalService)
# ---------------------------------------------------------------------
def load_submission(submission_id: UUID) -> Submission:
    """
    Fetch and lock a live (not soft-deleted) submission for a mutation.
    Callers run inside transaction.atomic, so policy checks see the row
    as it stands until commit.
    """
    try:
        return Submission.objects.select_for_update().visible().get(id=submission_id)
    except (Submission.DoesNotExist, DjangoValidationError):
        raise SubmissionNotFound()


def apply_transition(
    submission: Submission,
    *,
    operation: str,
    target: str,
    actor: Actor,
    **fields: Any,
) -> Submission:
    """
    Conditional write: UPDATE ... WHERE id=? AND status=<observed> AND the
    ownership the policy checked (creator, assignee) is unchanged AND
    deleted_at IS NULL. Zero matched rows means another writer got there first.
    """
    source = submission.status
    require_transition(operation, source, target)

    fields["status"] = target
    fields["updated_at"] = timezone.now()

    matched = Submission.objects.filter(
        id=submission.id,
        status=source,
        created_by_id=submission.created_by_id,
        assigned_to_id=submission.assigned_to_id,
        deleted_at__isnull=True,
    ).update(**fields)

    if matched != 1:
        logger.warning(
            "conflicting write submission=%s operation=%s expected_status=%s",
            submission.id,
            operation,
            source,
        )
        raise WorkflowConflict()

    for name, value in fields.items():
        setattr(submission, name, value)

    logger.info(
        "submission=%s %s %s -> %s user=%s",
        submission.id,
        operation,
        source,
        target,
        actor.user_id,
    )
    return submission


def _audit(submission: Submission, actor: Actor, changes: audit_changes.AuditChanges) -> None:
    AuditService.record(submission_id=submission.id, user_id=actor.user_id, changes=changes)


def _assignable_member(user_id: Any, *, clinic_id: UUID) -> StaffMember:
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise WorkflowValidationError("assign_to must be a user id.")

    member = get_staff_member(user_id)
    if member is None:
        raise WorkflowValidationError("Assignee not found.")
    if member.role not in (StaffRole.DOCTOR, StaffRole.NURSE):
        raise WorkflowValidationError("Submissions can only be assigned to a doctor or nurse.")
    if not is_member_of_clinic(user_id=user_id, clinic_id=clinic_id):
        raise WorkflowValidationError("Assignee does not belong to this clinic.")
    return member


def _require_doctor(user_id: Any) -> int:
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise WorkflowValidationError("assigned_doctor_id must be a user id.")
    member = get_staff_member(user_id)
    if member is None or member.role != StaffRole.DOCTOR:
        raise WorkflowValidationError("assigned_doctor_id must refer to a doctor.")
    return user_id


def _check_input(data: dict[str, Any], *, required: tuple[str, ...]) -> None:
    errors: list[str] = []
    for name in required:
        if data.get(name) in (None, ""):
            errors.append(f"{name}: this field is required.")
    exam_type = data.get("exam_type")
    if exam_type not in (None, "") and exam_type not in ExamType.values:
        errors.append(f"exam_type: unknown exam type '{exam_type}'.")
    if "form_data" in data and not isinstance(data["form_data"], dict):
        errors.append("form_data: must be an object.")
    if errors:
        raise WorkflowValidationError(errors)


def _approval_fields(actor: Actor) -> dict[str, Any]:
    ts = timezone.now()
    return {
        "approved_by_id": actor.user_id,
        "approved_date": ts,
        "submitted_date": ts,
    }


class SubmissionService:
    """
    Submission write-model operations (every state change goes through here
    or ApprovalService).

    Each operation: load -> authorize -> (validate content) -> conditional
    write -> audit, inside one transaction. Failures are raised as
    exam_core.common.exceptions types and never swallowed.
    """

    @staticmethod
    @transaction.atomic
    def create(*, actor: Actor, data: dict[str, Any]) -> Submission:
        authorize(Operation.CREATE, actor)
        _check_input(data, required=REQUIRED_ON_CREATE)

        assign_to = data.get("assign_to")
        target: Optional[StaffMember] = None
        if assign_to is not None:
            target = _assignable_member(assign_to, clinic_id=actor.clinic_id)

        if data.get("assigned_doctor_id") is not None:
            _require_doctor(data["assigned_doctor_id"])

        status = initial_status(
            actor,
            route_for_approval=data.get("route_for_approval"),
            assign_to=assign_to,
        )

        form_data = data.get("form_data") or {}
        if status in (SUBMITTED, PENDING_APPROVAL):
            validate_content(data["exam_type"], form_data)

        submission = Submission(
            clinic_id=actor.clinic_id,
            created_by_id=actor.user_id,
            status=status,
            form_data=form_data,
            **{k: data[k] for k in EDITABLE_FIELDS if k in data and k != "form_data"},
        )
        if status == SUBMITTED:
            for name, value in _approval_fields(actor).items():
                setattr(submission, name, value)
        if target is not None:
            submission.assigned_to_id = target.user_id
            submission.assigned_to_role = target.role
            submission.assigned_at = timezone.now()
            submission.assigned_by_id = actor.user_id
        submission.save()

        _audit(submission, actor, audit_changes.Created(status=status, exam_type=submission.exam_type))
        if status in (SUBMITTED, PENDING_APPROVAL):
            agency = agency_for(submission.exam_type) if status == SUBMITTED else None
            _audit(submission, actor, audit_changes.Submitted(status=status, agency=agency))
        if target is not None:
            _audit(
                submission,
                actor,
                audit_changes.Assigned(
                    assigned_to_id=target.user_id,
                    assigned_to_name=target.display_name,
                    assigned_to_role=target.role,
                    note=data.get("note") or None,
                ),
            )

        logger.info("submission=%s created status=%s user=%s", submission.id, status, actor.user_id)
        return submission

    @staticmethod
    @transaction.atomic
    def update(*, actor: Actor, submission_id: UUID, patch: dict[str, Any]) -> Submission:
        """
        Field edit. A doctor editing a pending_approval item converts it to
        draft in the same write (convert_to_draft_for_doctor_edit).
        `assign_to` in the patch continues with the assign transition.
        """
        submission = load_submission(submission_id)
        authorize(Operation.UPDATE, actor, submission)
        _check_input(patch, required=())

        edits = {
            k: patch[k]
            for k in EDITABLE_FIELDS
            if k in patch and getattr(submission, k) != patch[k]
        }
        if edits.get("assigned_doctor_id") is not None:
            _require_doctor(edits["assigned_doctor_id"])

        previous_status = submission.status
        if previous_status == PENDING_APPROVAL and actor.is_doctor:
            fields = convert_to_draft_for_doctor_edit(source=previous_status, actor=actor)
            submission = apply_transition(
                submission,
                operation=Operation.CONVERT_TO_DRAFT_FOR_DOCTOR_EDIT,
                target=fields.pop("status"),
                actor=actor,
                **edits,
                **fields,
            )
            _audit(
                submission,
                actor,
                audit_changes.Updated(
                    fields=tuple(sorted(edits)),
                    action="converted_for_doctor_edit",
                    previous_status=previous_status,
                    new_status=DRAFT,
                ),
            )
        elif edits:
            if previous_status == PENDING_APPROVAL and ("exam_type" in edits or "form_data" in edits):
                validate_content(
                    edits.get("exam_type", submission.exam_type),
                    edits.get("form_data", submission.form_data),
                )
            submission = apply_transition(
                submission,
                operation=Operation.UPDATE,
                target=previous_status,
                actor=actor,
                **edits,
            )
            _audit(submission, actor, audit_changes.Updated(fields=tuple(sorted(edits))))

        if patch.get("assign_to") is not None:
            submission = SubmissionService._assign(
                actor=actor,
                submission=submission,
                assign_to=patch["assign_to"],
                note=patch.get("note"),
            )
        return submission

    @staticmethod
    @transaction.atomic
    def submit_for_approval(*, actor: Actor, submission_id: UUID) -> Submission:
        submission = load_submission(submission_id)
        authorize(Operation.SUBMIT_FOR_APPROVAL, actor, submission)
        validate_content(submission.exam_type, submission.form_data)

        if actor.is_doctor:
            submission = apply_transition(
                submission,
                operation=Operation.SUBMIT_FOR_APPROVAL,
                target=SUBMITTED,
                actor=actor,
                converted_for_edit_by_id=None,
                **_approval_fields(actor),
            )
            changes = audit_changes.Submitted(status=SUBMITTED, agency=agency_for(submission.exam_type))
        else:
            submission = apply_transition(
                submission,
                operation=Operation.SUBMIT_FOR_APPROVAL,
                target=PENDING_APPROVAL,
                actor=actor,
                converted_for_edit_by_id=None,
            )
            changes = audit_changes.Submitted(status=PENDING_APPROVAL)

        _audit(submission, actor, changes)
        return submission

    @staticmethod
    @transaction.atomic
    def assign(
        *,
        actor: Actor,
        submission_id: UUID,
        assign_to: int,
        note: Optional[str] = None,
    ) -> Submission:
        submission = load_submission(submission_id)
        return SubmissionService._assign(actor=actor, submission=submission, assign_to=assign_to, note=note)

    @staticmethod
    def _assign(*, actor: Actor, submission: Submission, assign_to: Any, note: Optional[str]) -> Submission:
        authorize(Operation.ASSIGN, actor, submission)
        target = _assignable_member(assign_to, clinic_id=submission.clinic_id)

        previous_status = submission.status
        previous_assignee = submission.assigned_to_id

        # Idempotent no-op: same assignee
        if previous_status == IN_PROGRESS and previous_assignee == target.user_id:
            return submission

        submission = apply_transition(
            submission,
            operation=Operation.ASSIGN,
            target=IN_PROGRESS,
            actor=actor,
            assigned_to_id=target.user_id,
            assigned_to_role=target.role,
            assigned_at=timezone.now(),
            assigned_by_id=actor.user_id,
        )

        if previous_status == IN_PROGRESS:
            changes = audit_changes.Reassigned(
                assigned_to_id=target.user_id,
                assigned_to_name=target.display_name,
                assigned_to_role=target.role,
                previous_assigned_to_id=previous_assignee,
                note=note or None,
            )
        else:
            changes = audit_changes.Assigned(
                assigned_to_id=target.user_id,
                assigned_to_name=target.display_name,
                assigned_to_role=target.role,
                note=note or None,
            )
        _audit(submission, actor, changes)
        return submission

    @staticmethod
    @transaction.atomic
    def claim(*, actor: Actor, submission_id: UUID) -> dict[str, Any]:
        """
        Marks that the assignee started working. No field changes; the
        row is locked so the claim cannot interleave with a reassignment.
        """
        submission = load_submission(submission_id)
        authorize(Operation.CLAIM, actor, submission)
        require_transition(Operation.CLAIM, submission.status, IN_PROGRESS)

        locked = (
            Submission.objects.select_for_update()
            .filter(
                id=submission.id,
                status=IN_PROGRESS,
                assigned_to_id=actor.user_id,
                deleted_at__isnull=True,
            )
            .first()
        )
        if locked is None:
            logger.warning("conflicting claim submission=%s user=%s", submission.id, actor.user_id)
            raise WorkflowConflict()

        _audit(locked, actor, audit_changes.Claimed(assigned_to_id=actor.user_id))
        logger.info("submission=%s claimed user=%s", locked.id, actor.user_id)
        return {"success": True, "message": "Submission claimed."}

    @staticmethod
    @transaction.atomic
    def submit_collaborative_draft(*, actor: Actor, submission_id: UUID) -> Submission:
        submission = load_submission(submission_id)
        authorize(Operation.SUBMIT_COLLABORATIVE_DRAFT, actor, submission)
        validate_content(submission.exam_type, submission.form_data)

        submission = apply_transition(
            submission,
            operation=Operation.SUBMIT_COLLABORATIVE_DRAFT,
            target=SUBMITTED,
            actor=actor,
            **_approval_fields(actor),
        )
        _audit(
            submission,
            actor,
            audit_changes.Submitted(status=SUBMITTED, agency=agency_for(submission.exam_type)),
        )
        return submission

    @staticmethod
    @transaction.atomic
    def reopen(*, actor: Actor, submission_id: UUID) -> Submission:
        """
        rejected -> draft. rejected_reason and approved_by_id stay as the
        rejection's provenance; approved_date is cleared, and so is any
        earlier doctor-edit conversion.
        """
        submission = load_submission(submission_id)
        authorize(Operation.REOPEN, actor, submission)

        previous_status = submission.status
        submission = apply_transition(
            submission,
            operation=Operation.REOPEN,
            target=DRAFT,
            actor=actor,
            approved_date=None,
            converted_for_edit_by_id=None,
        )
        _audit(
            submission,
            actor,
            audit_changes.Updated(action="reopened", previous_status=previous_status, new_status=DRAFT),
        )
        return submission

    @staticmethod
    @transaction.atomic
    def delete(*, actor: Actor, submission_id: UUID) -> dict[str, Any]:
        submission = load_submission(submission_id)
        authorize(Operation.DELETE, actor, submission)

        submission = apply_transition(
            submission,
            operation=Operation.DELETE,
            target=DRAFT,
            actor=actor,
            deleted_at=timezone.now(),
        )
        _audit(
            submission,
            actor,
            audit_changes.Deleted(patient_name=submission.patient_name, exam_type=submission.exam_type),
        )
        return {"success": True, "message": "Submission deleted."}
