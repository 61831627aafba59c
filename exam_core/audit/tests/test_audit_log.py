import pytest
from django.db import DatabaseError

from exam_core.audit import changes
from exam_core.audit.models import AuditLog, ImmutableAuditLog
from exam_core.audit.selectors import history, list_audit_logs
from exam_core.audit.services import AuditService
from exam_core.common.exceptions import AuditWriteError, SubmissionNotFound, WorkflowValidationError

pytestmark = pytest.mark.django_db


def test_entries_are_append_only(draft):
    entry = AuditLog.objects.get(submission_id=draft.id)

    entry.changes = {"tampered": True}
    with pytest.raises(ImmutableAuditLog):
        entry.save()
    with pytest.raises(ImmutableAuditLog):
        entry.delete()

    assert AuditLog.objects.get(id=entry.id).changes == {"status": "draft", "exam_type": "SIX_MONTHLY_MDW"}


def test_record_writes_typed_payload(draft, doctor_actor):
    entry = AuditService.record(
        submission_id=draft.id,
        user_id=doctor_actor.user_id,
        changes=changes.Approved(notes="fine"),
    )
    assert entry.event_type == "approved"
    assert entry.changes == {"notes": "fine"}
    assert entry.timestamp is not None


def test_record_failure_is_fatal(draft, monkeypatch):
    def broken_create(**kwargs):
        raise DatabaseError("disk full")

    monkeypatch.setattr(AuditLog.objects, "create", broken_create)

    with pytest.raises(AuditWriteError):
        AuditService.record(submission_id=draft.id, user_id=1, changes=changes.Claimed(assigned_to_id=1))


def test_list_and_history_ordering(pending, doctor_actor):
    from exam_core.approvals.services import ApprovalService

    ApprovalService.approve(actor=doctor_actor, submission_id=pending.id, notes="ok")

    asc = [e.event_type for e in list_audit_logs(submission_id=pending.id)]
    assert asc == ["created", "submitted", "approved", "submitted"]

    desc = [e["event_type"] for e in history(submission_id=pending.id, order="desc")["events"]]
    assert desc == list(reversed(asc))

    only = list(list_audit_logs(submission_id=pending.id, event_type="approved"))
    assert len(only) == 1


def test_history_user_names(pending, nurse):
    events = history(submission_id=pending.id)["events"]
    assert {e["user_name"] for e in events} == {"Nina Tan"}
    assert events[0]["details"]["status"] == "pending_approval"


def test_history_survives_soft_delete(draft, nurse_actor):
    from exam_core.submissions.services import SubmissionService

    SubmissionService.delete(actor=nurse_actor, submission_id=draft.id)
    assert [e["event_type"] for e in history(submission_id=draft.id)["events"]] == ["created", "deleted"]


def test_history_errors(draft):
    with pytest.raises(WorkflowValidationError):
        history(submission_id=draft.id, order="random")
    with pytest.raises(SubmissionNotFound):
        history(submission_id="00000000-0000-0000-0000-000000000000")
