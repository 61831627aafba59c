import pytest

from exam_core.audit.models import AuditLog
from exam_core.common.exceptions import (
    SubmissionNotFound,
    WorkflowConflict,
    WorkflowForbidden,
    WorkflowValidationError,
)
from exam_core.submissions.models import AGENCY_MOM, AGENCY_TP_LTA, Submission, SubmissionStatus
from exam_core.submissions.services import SubmissionService, apply_transition, load_submission
from exam_core.submissions.workflow import Operation

pytestmark = pytest.mark.django_db


def events(submission):
    return list(
        AuditLog.objects.filter(submission_id=submission.id)
        .order_by("id")
        .values_list("event_type", flat=True)
    )


# ----------------------------
# create
# ----------------------------
def test_nurse_create_routes_for_approval_by_default(pending, nurse_actor):
    assert pending.status == SubmissionStatus.PENDING_APPROVAL
    assert pending.created_by_id == nurse_actor.user_id
    assert pending.clinic_id == nurse_actor.clinic_id
    assert pending.approved_by_id is None
    assert events(pending) == ["created", "submitted"]

    submitted = AuditLog.objects.get(submission_id=pending.id, event_type="submitted")
    assert submitted.changes == {"status": "pending_approval"}


def test_nurse_create_as_draft_writes_only_created(draft):
    assert draft.status == SubmissionStatus.DRAFT
    assert events(draft) == ["created"]


def test_doctor_create_is_submitted_directly(make_submission, doctor_actor):
    s = make_submission(doctor_actor)

    s.refresh_from_db()
    assert s.status == SubmissionStatus.SUBMITTED
    assert s.approved_by_id == doctor_actor.user_id
    assert s.approved_date is not None
    assert s.submitted_date is not None
    assert events(s) == ["created", "submitted"]

    entry = AuditLog.objects.get(submission_id=s.id, event_type="submitted")
    assert entry.changes == {"status": "submitted", "agency": AGENCY_MOM}


def test_driving_exam_reports_to_traffic_police(make_submission, doctor_actor):
    s = make_submission(doctor_actor, exam_type="DRIVING_LICENCE_TP")
    entry = AuditLog.objects.get(submission_id=s.id, event_type="submitted")
    assert entry.changes["agency"] == AGENCY_TP_LTA


def test_admin_create_with_assignee_starts_collaborative_draft(make_submission, admin_actor, nurse):
    s = make_submission(admin_actor, assign_to=nurse.id, note="please fill vitals")

    s.refresh_from_db()
    assert s.status == SubmissionStatus.IN_PROGRESS
    assert s.assigned_to_id == nurse.id
    assert s.assigned_to_role == "nurse"
    assert s.assigned_by_id == admin_actor.user_id
    assert s.assigned_at is not None
    assert events(s) == ["created", "assigned"]

    entry = AuditLog.objects.get(submission_id=s.id, event_type="assigned")
    assert entry.changes == {
        "assigned_to_id": nurse.id,
        "assigned_to_name": "Nina Tan",
        "assigned_to_role": "nurse",
        "note": "please fill vitals",
    }


def test_create_rejects_unknown_assignee_and_admin_assignee(make_submission, nurse_actor, admin):
    with pytest.raises(WorkflowValidationError):
        make_submission(nurse_actor, assign_to=999999)

    with pytest.raises(WorkflowValidationError):
        make_submission(nurse_actor, assign_to=admin.id)

    assert Submission.objects.count() == 0


def test_create_rejects_assignee_from_another_clinic(make_submission, nurse_actor, foreign_doctor):
    with pytest.raises(WorkflowValidationError):
        make_submission(nurse_actor, assign_to=foreign_doctor.id)


def test_create_requires_patient_and_known_exam_type(nurse_actor):
    with pytest.raises(WorkflowValidationError) as exc:
        SubmissionService.create(actor=nurse_actor, data={"exam_type": "NOPE", "form_data": {}})

    msgs = exc.value.messages
    assert any(m.startswith("patient_name") for m in msgs)
    assert any(m.startswith("exam_type") for m in msgs)
    assert AuditLog.objects.count() == 0


def test_assigned_doctor_must_be_a_doctor(make_submission, nurse_actor, other_nurse, doctor):
    with pytest.raises(WorkflowValidationError):
        make_submission(nurse_actor, assigned_doctor_id=other_nurse.id)

    s = make_submission(nurse_actor, assigned_doctor_id=doctor.id)
    assert s.assigned_doctor_id == doctor.id


# ----------------------------
# update
# ----------------------------
def test_creator_edits_draft(draft, nurse_actor):
    s = SubmissionService.update(
        actor=nurse_actor,
        submission_id=draft.id,
        patch={"patient_name": "Siti Binte Aminah", "form_data": {"weight": 56}},
    )

    s.refresh_from_db()
    assert s.status == SubmissionStatus.DRAFT
    assert s.patient_name == "Siti Binte Aminah"
    assert s.form_data == {"weight": 56}

    entry = AuditLog.objects.filter(submission_id=s.id, event_type="updated").get()
    assert entry.changes == {"fields": ["form_data", "patient_name"]}


def test_update_without_changes_is_a_noop(draft, nurse_actor):
    before = draft.updated_at
    SubmissionService.update(
        actor=nurse_actor,
        submission_id=draft.id,
        patch={"patient_name": draft.patient_name},
    )
    draft.refresh_from_db()
    assert draft.updated_at == before
    assert events(draft) == ["created"]


def test_other_nurse_cannot_edit(draft, other_nurse_actor):
    with pytest.raises(WorkflowForbidden):
        SubmissionService.update(actor=other_nurse_actor, submission_id=draft.id, patch={"patient_name": "X"})


def test_submitted_is_not_editable(make_submission, doctor_actor):
    s = make_submission(doctor_actor)
    with pytest.raises(WorkflowForbidden):
        SubmissionService.update(actor=doctor_actor, submission_id=s.id, patch={"patient_name": "X"})


def test_doctor_edit_then_submit(pending, doctor_actor):
    """
    Doctor edits a nurse's pending item: converted to draft, then the same
    doctor submits it directly.
    """
    s = SubmissionService.update(
        actor=doctor_actor,
        submission_id=pending.id,
        patch={"form_data": {"weight": 54, "pregnancy_test": "negative"}},
    )
    s.refresh_from_db()
    assert s.status == SubmissionStatus.DRAFT
    assert s.converted_for_edit_by_id == doctor_actor.user_id
    assert s.form_data["weight"] == 54

    entry = AuditLog.objects.filter(submission_id=s.id, event_type="updated").get()
    assert entry.changes["action"] == "converted_for_doctor_edit"
    assert entry.changes["previous_status"] == "pending_approval"
    assert entry.changes["new_status"] == "draft"

    s = SubmissionService.submit_for_approval(actor=doctor_actor, submission_id=s.id)
    s.refresh_from_db()
    assert s.status == SubmissionStatus.SUBMITTED
    assert s.approved_by_id == doctor_actor.user_id
    assert s.submitted_date is not None


def test_conversion_does_not_outlive_the_next_submit(pending, nurse_actor, doctor_actor, other_doctor_actor):
    from exam_core.approvals.services import ApprovalService

    SubmissionService.update(actor=doctor_actor, submission_id=pending.id, patch={"patient_mobile": "+6591111111"})

    # the creator sends the converted draft back for review
    s = SubmissionService.submit_for_approval(actor=nurse_actor, submission_id=pending.id)
    s.refresh_from_db()
    assert s.status == SubmissionStatus.PENDING_APPROVAL
    assert s.converted_for_edit_by_id is None

    ApprovalService.reject(actor=other_doctor_actor, submission_id=s.id, reason="Missing vitals")
    s = SubmissionService.reopen(actor=nurse_actor, submission_id=s.id)
    assert s.converted_for_edit_by_id is None

    with pytest.raises(WorkflowForbidden):
        SubmissionService.submit_for_approval(actor=doctor_actor, submission_id=s.id)


def test_update_with_assign_to_continues_into_assignment(draft, nurse_actor, other_nurse):
    s = SubmissionService.update(
        actor=nurse_actor,
        submission_id=draft.id,
        patch={"patient_mobile": "+6590000000", "assign_to": other_nurse.id},
    )
    s.refresh_from_db()
    assert s.status == SubmissionStatus.IN_PROGRESS
    assert s.assigned_to_id == other_nurse.id
    assert events(s) == ["created", "updated", "assigned"]


# ----------------------------
# submit_for_approval
# ----------------------------
def test_nurse_submits_draft_for_approval(draft, nurse_actor):
    s = SubmissionService.submit_for_approval(actor=nurse_actor, submission_id=draft.id)
    s.refresh_from_db()
    assert s.status == SubmissionStatus.PENDING_APPROVAL
    assert events(s) == ["created", "submitted"]


def test_submit_runs_content_validator(make_submission, nurse_actor):
    s = make_submission(nurse_actor, route_for_approval=False)
    Submission.objects.filter(id=s.id).update(form_data=["not", "an", "object"])

    with pytest.raises(WorkflowValidationError):
        SubmissionService.submit_for_approval(actor=nurse_actor, submission_id=s.id)

    s.refresh_from_db()
    assert s.status == SubmissionStatus.DRAFT


def test_submit_pending_again_is_forbidden(pending, nurse_actor):
    with pytest.raises(WorkflowForbidden):
        SubmissionService.submit_for_approval(actor=nurse_actor, submission_id=pending.id)


# ----------------------------
# assign / claim / collaborative submit
# ----------------------------
def test_reassign_records_previous_assignee(draft, nurse_actor, other_nurse, doctor):
    SubmissionService.assign(actor=nurse_actor, submission_id=draft.id, assign_to=other_nurse.id)
    s = SubmissionService.assign(actor=nurse_actor, submission_id=draft.id, assign_to=doctor.id, note="review")

    s.refresh_from_db()
    assert s.assigned_to_id == doctor.id
    assert s.assigned_to_role == "doctor"

    entry = AuditLog.objects.get(submission_id=s.id, event_type="reassigned")
    assert entry.changes["previous_assigned_to_id"] == other_nurse.id
    assert entry.changes["assigned_to_id"] == doctor.id
    assert entry.changes["note"] == "review"


def test_assign_to_same_user_is_idempotent(draft, nurse_actor, other_nurse):
    SubmissionService.assign(actor=nurse_actor, submission_id=draft.id, assign_to=other_nurse.id)
    SubmissionService.assign(actor=nurse_actor, submission_id=draft.id, assign_to=other_nurse.id)

    assert events(draft) == ["created", "assigned"]


def test_assignee_may_hand_over(draft, nurse_actor, other_nurse_actor, doctor):
    SubmissionService.assign(actor=nurse_actor, submission_id=draft.id, assign_to=other_nurse_actor.user_id)
    s = SubmissionService.assign(actor=other_nurse_actor, submission_id=draft.id, assign_to=doctor.id)
    assert s.assigned_to_id == doctor.id


def test_claim_by_assignee(make_submission, admin_actor, nurse, nurse_actor):
    s = make_submission(admin_actor, assign_to=nurse.id)
    before = Submission.objects.values().get(id=s.id)

    result = SubmissionService.claim(actor=nurse_actor, submission_id=s.id)

    assert result == {"success": True, "message": "Submission claimed."}
    assert Submission.objects.values().get(id=s.id) == before
    assert events(s) == ["created", "assigned", "claimed"]

    entry = AuditLog.objects.get(submission_id=s.id, event_type="claimed")
    assert entry.user_id == nurse.id
    assert entry.changes == {"assigned_to_id": nurse.id}


def test_claim_by_non_assignee_is_forbidden(make_submission, admin_actor, nurse, other_nurse_actor):
    s = make_submission(admin_actor, assign_to=nurse.id)
    with pytest.raises(WorkflowForbidden):
        SubmissionService.claim(actor=other_nurse_actor, submission_id=s.id)
    with pytest.raises(WorkflowForbidden):
        SubmissionService.claim(actor=admin_actor, submission_id=s.id)


def test_doctor_submits_collaborative_draft(make_submission, nurse_actor, other_nurse, doctor_actor):
    s = make_submission(nurse_actor, assign_to=other_nurse.id)

    s = SubmissionService.submit_collaborative_draft(actor=doctor_actor, submission_id=s.id)
    s.refresh_from_db()
    assert s.status == SubmissionStatus.SUBMITTED
    assert s.approved_by_id == doctor_actor.user_id
    assert events(s)[-1] == "submitted"


def test_nurse_cannot_submit_collaborative_draft(make_submission, nurse_actor, other_nurse, other_nurse_actor):
    s = make_submission(nurse_actor, assign_to=other_nurse.id)
    with pytest.raises(WorkflowForbidden):
        SubmissionService.submit_collaborative_draft(actor=other_nurse_actor, submission_id=s.id)


# ----------------------------
# reopen / delete
# ----------------------------
def test_reopen_only_from_rejected(draft, nurse_actor):
    with pytest.raises(WorkflowForbidden):
        SubmissionService.reopen(actor=nurse_actor, submission_id=draft.id)


def test_delete_draft_is_soft(draft, nurse_actor):
    result = SubmissionService.delete(actor=nurse_actor, submission_id=draft.id)
    assert result == {"success": True, "message": "Submission deleted."}

    row = Submission.objects.get(id=draft.id)
    assert row.deleted_at is not None
    assert row.status == SubmissionStatus.DRAFT

    entry = AuditLog.objects.get(submission_id=draft.id, event_type="deleted")
    assert entry.changes == {"patient_name": "Siti Aminah", "exam_type": "SIX_MONTHLY_MDW"}

    with pytest.raises(SubmissionNotFound):
        load_submission(draft.id)
    with pytest.raises(SubmissionNotFound):
        SubmissionService.update(actor=nurse_actor, submission_id=draft.id, patch={"patient_name": "X"})


def test_nurse_cannot_delete_submitted(make_submission, doctor_actor, nurse_actor):
    """Forbidden, nothing written."""
    s = make_submission(doctor_actor)
    Submission.objects.filter(id=s.id).update(created_by_id=nurse_actor.user_id)
    audit_before = AuditLog.objects.count()

    with pytest.raises(WorkflowForbidden):
        SubmissionService.delete(actor=nurse_actor, submission_id=s.id)

    s.refresh_from_db()
    assert s.deleted_at is None
    assert s.status == SubmissionStatus.SUBMITTED
    assert AuditLog.objects.count() == audit_before


def test_unknown_or_malformed_id_is_not_found(nurse_actor):
    with pytest.raises(SubmissionNotFound):
        SubmissionService.delete(actor=nurse_actor, submission_id="not-a-uuid")
    with pytest.raises(SubmissionNotFound):
        SubmissionService.delete(actor=nurse_actor, submission_id="00000000-0000-0000-0000-000000000000")


# ----------------------------
# conditional write
# ----------------------------
def test_stale_snapshot_conflicts(pending, nurse_actor):
    stale = Submission.objects.get(id=pending.id)
    Submission.objects.filter(id=pending.id).update(status=SubmissionStatus.REJECTED)

    with pytest.raises(WorkflowConflict):
        apply_transition(stale, operation=Operation.UPDATE, target=SubmissionStatus.PENDING_APPROVAL, actor=nurse_actor)


def test_same_status_write_from_stale_assignee_conflicts(make_submission, admin_actor, nurse, nurse_actor, doctor):
    s = make_submission(admin_actor, assign_to=nurse.id)
    stale = Submission.objects.get(id=s.id)
    Submission.objects.filter(id=s.id).update(assigned_to_id=doctor.id)

    with pytest.raises(WorkflowConflict):
        apply_transition(
            stale,
            operation=Operation.UPDATE,
            target=SubmissionStatus.IN_PROGRESS,
            actor=nurse_actor,
            patient_mobile="+6590000000",
        )

    s.refresh_from_db()
    assert s.patient_mobile != "+6590000000"


def test_audit_failure_rolls_back_state_change(draft, nurse_actor, monkeypatch):
    from exam_core.audit.services import AuditService
    from exam_core.common.exceptions import AuditWriteError

    def boom(**kwargs):
        raise AuditWriteError()

    monkeypatch.setattr(AuditService, "record", staticmethod(boom))

    with pytest.raises(AuditWriteError):
        SubmissionService.submit_for_approval(actor=nurse_actor, submission_id=draft.id)

    draft.refresh_from_db()
    assert draft.status == SubmissionStatus.DRAFT
