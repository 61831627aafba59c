# exam_core/submissions/policy.py
"""
Authorization policy for the submission workflow.

Pure functions over (operation, actor, submission snapshot); no queries.
`decide` answers, `authorize` raises. Status checks live in the workflow
graph; the rules here gate on role and ownership and, where the caller
rule itself depends on status, on the snapshot's status.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from exam_core.common.exceptions import SubmissionNotFound, WorkflowForbidden
from exam_core.iam.identity import Actor
from exam_core.iam.models import StaffRole
from exam_core.submissions.models import Submission
from exam_core.submissions.workflow import IN_PROGRESS, PENDING_APPROVAL, Operation, valid_from

STAFF_ROLES = frozenset(StaffRole.values)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    # deny as "not found" so existence is not leaked
    hidden: bool = False

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)

    @classmethod
    def not_found(cls) -> "Decision":
        return cls(allowed=False, reason="Submission not found.", hidden=True)


def _is_creator(actor: Actor, sub: Submission) -> bool:
    return sub.created_by_id == actor.user_id


def _is_assignee(actor: Actor, sub: Submission) -> bool:
    return sub.assigned_to_id is not None and sub.assigned_to_id == actor.user_id


def _same_clinic(actor: Actor, sub: Submission) -> bool:
    return sub.clinic_id == actor.clinic_id


def _status_gate(operation: str, sub: Submission) -> Decision:
    if sub.status not in valid_from(operation):
        return Decision.deny(f"Cannot {operation.replace('_', ' ')} a submission in status '{sub.status}'.")
    return Decision.allow()


# ---------------------------------------------------------------------
# Per-operation caller rules
# ---------------------------------------------------------------------
def _can_create(actor: Actor, sub: Optional[Submission]) -> Decision:
    if actor.role not in STAFF_ROLES:
        return Decision.deny("Only clinic staff can create submissions.")
    return Decision.allow()


def _can_read(actor: Actor, sub: Submission) -> Decision:
    if actor.is_admin:
        if not _same_clinic(actor, sub):
            return Decision.deny("Submission belongs to another clinic.")
        return Decision.allow()

    if sub.deleted_at is not None:
        return Decision.not_found()

    if (
        _is_creator(actor, sub)
        or sub.approved_by_id == actor.user_id
        or _is_assignee(actor, sub)
        or _same_clinic(actor, sub)
    ):
        return Decision.allow()
    return Decision.deny("You do not have access to this submission.")


def _can_update(actor: Actor, sub: Submission) -> Decision:
    if actor.is_admin or _is_creator(actor, sub):
        return _status_gate(Operation.UPDATE, sub)
    if actor.is_doctor and sub.status == PENDING_APPROVAL and _same_clinic(actor, sub):
        return Decision.allow()
    if sub.status == IN_PROGRESS and _is_assignee(actor, sub):
        return Decision.allow()
    return Decision.deny("You can only edit your own submissions.")


def _can_submit_for_approval(actor: Actor, sub: Submission) -> Decision:
    converted_by_doctor = (
        actor.is_doctor
        and sub.converted_for_edit_by_id is not None
        and _same_clinic(actor, sub)
    )
    if not (actor.is_admin or _is_creator(actor, sub) or converted_by_doctor):
        return Decision.deny("You can only submit your own drafts.")
    return _status_gate(Operation.SUBMIT_FOR_APPROVAL, sub)


def _can_assign(actor: Actor, sub: Submission) -> Decision:
    if not (
        actor.is_admin
        or _is_creator(actor, sub)
        or (sub.status == IN_PROGRESS and _is_assignee(actor, sub))
    ):
        return Decision.deny("Only the creator, the current assignee or an admin can assign this submission.")
    return _status_gate(Operation.ASSIGN, sub)


def _can_claim(actor: Actor, sub: Submission) -> Decision:
    if not _is_assignee(actor, sub):
        return Decision.deny("Only the assigned user can claim this submission.")
    return _status_gate(Operation.CLAIM, sub)


def _can_submit_collaborative_draft(actor: Actor, sub: Submission) -> Decision:
    if not (actor.is_doctor or actor.is_admin):
        return Decision.deny("Only doctors or admins can submit a collaborative draft.")
    return _status_gate(Operation.SUBMIT_COLLABORATIVE_DRAFT, sub)


def _can_review(operation: str) -> Callable[[Actor, Submission], Decision]:
    def rule(actor: Actor, sub: Submission) -> Decision:
        if not actor.is_doctor:
            return Decision.deny(f"Only doctors can {operation} submissions.")
        if not _same_clinic(actor, sub):
            return Decision.deny("Access denied.")
        return _status_gate(operation, sub)
    return rule


def _can_reopen(actor: Actor, sub: Submission) -> Decision:
    if not (actor.is_admin or _is_creator(actor, sub)):
        return Decision.deny("Only the creator or an admin can reopen this submission.")
    return _status_gate(Operation.REOPEN, sub)


def _can_delete(actor: Actor, sub: Submission) -> Decision:
    if not (actor.is_admin or _is_creator(actor, sub)):
        return Decision.deny("You can only delete your own drafts.")
    return _status_gate(Operation.DELETE, sub)


_RULES: dict[str, Callable[[Actor, Optional[Submission]], Decision]] = {
    Operation.CREATE: _can_create,
    Operation.READ: _can_read,
    Operation.UPDATE: _can_update,
    Operation.SUBMIT_FOR_APPROVAL: _can_submit_for_approval,
    Operation.ASSIGN: _can_assign,
    Operation.CLAIM: _can_claim,
    Operation.SUBMIT_COLLABORATIVE_DRAFT: _can_submit_collaborative_draft,
    Operation.APPROVE: _can_review(Operation.APPROVE),
    Operation.REJECT: _can_review(Operation.REJECT),
    Operation.REOPEN: _can_reopen,
    Operation.DELETE: _can_delete,
}


def decide(operation: str, actor: Actor, submission: Optional[Submission] = None) -> Decision:
    rule = _RULES.get(operation)
    if rule is None:
        return Decision.deny(f"Unknown operation: {operation}")
    if operation != Operation.CREATE and submission is None:
        return Decision.not_found()
    if operation not in (Operation.CREATE, Operation.READ) and submission.deleted_at is not None:
        return Decision.not_found()
    return rule(actor, submission)


def authorize(operation: str, actor: Actor, submission: Optional[Submission] = None) -> None:
    decision = decide(operation, actor, submission)
    if decision.allowed:
        return
    if decision.hidden:
        raise SubmissionNotFound()
    raise WorkflowForbidden(decision.reason)
