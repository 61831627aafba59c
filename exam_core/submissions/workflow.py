# exam_core/submissions/workflow.py
"""
Submission state machine.

The graph is data: TRANSITIONS lists every (operation, source, target) edge
the engine may take. Services ask `require_transition` before writing, so an
operation attempted from a status outside its valid-from set fails with
WorkflowForbidden and nothing is persisted.

Soft deletion and the retained rejection fields sit on top of these five
states; they are not states themselves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from exam_core.common.exceptions import WorkflowForbidden
from exam_core.iam.identity import Actor
from exam_core.submissions.models import SubmissionStatus

DRAFT = SubmissionStatus.DRAFT
PENDING_APPROVAL = SubmissionStatus.PENDING_APPROVAL
IN_PROGRESS = SubmissionStatus.IN_PROGRESS
SUBMITTED = SubmissionStatus.SUBMITTED
REJECTED = SubmissionStatus.REJECTED


class Operation:
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    CONVERT_TO_DRAFT_FOR_DOCTOR_EDIT = "convert_to_draft_for_doctor_edit"
    SUBMIT_FOR_APPROVAL = "submit_for_approval"
    ASSIGN = "assign"
    CLAIM = "claim"
    SUBMIT_COLLABORATIVE_DRAFT = "submit_collaborative_draft"
    APPROVE = "approve"
    REJECT = "reject"
    REOPEN = "reopen"
    DELETE = "delete"


@dataclass(frozen=True)
class Transition:
    operation: str
    source: str
    target: str


TRANSITIONS: tuple[Transition, ...] = (
    Transition(Operation.UPDATE, DRAFT, DRAFT),
    Transition(Operation.UPDATE, IN_PROGRESS, IN_PROGRESS),
    Transition(Operation.UPDATE, PENDING_APPROVAL, PENDING_APPROVAL),
    Transition(Operation.CONVERT_TO_DRAFT_FOR_DOCTOR_EDIT, PENDING_APPROVAL, DRAFT),
    Transition(Operation.SUBMIT_FOR_APPROVAL, DRAFT, PENDING_APPROVAL),
    Transition(Operation.SUBMIT_FOR_APPROVAL, DRAFT, SUBMITTED),
    Transition(Operation.ASSIGN, DRAFT, IN_PROGRESS),
    Transition(Operation.ASSIGN, IN_PROGRESS, IN_PROGRESS),
    Transition(Operation.CLAIM, IN_PROGRESS, IN_PROGRESS),
    Transition(Operation.SUBMIT_COLLABORATIVE_DRAFT, IN_PROGRESS, SUBMITTED),
    Transition(Operation.APPROVE, PENDING_APPROVAL, SUBMITTED),
    Transition(Operation.REJECT, PENDING_APPROVAL, REJECTED),
    Transition(Operation.REOPEN, REJECTED, DRAFT),
    Transition(Operation.DELETE, DRAFT, DRAFT),
)

_EDGES = {(t.operation, t.source, t.target) for t in TRANSITIONS}


def valid_from(operation: str) -> frozenset[str]:
    return frozenset(t.source for t in TRANSITIONS if t.operation == operation)


def targets(operation: str, source: str) -> frozenset[str]:
    return frozenset(t.target for t in TRANSITIONS if t.operation == operation and t.source == source)


def can_transition(operation: str, source: str, target: str) -> bool:
    return (operation, source, target) in _EDGES


def require_transition(operation: str, source: str, target: str) -> None:
    if not can_transition(operation, source, target):
        raise WorkflowForbidden(
            f"Cannot {operation.replace('_', ' ')} a submission in status '{source}'."
        )


def initial_status(actor: Actor, *, route_for_approval: Optional[bool], assign_to: Optional[int]) -> str:
    """
    Status a new submission starts in.

    assign_to            -> in_progress (collaborative draft)
    route_for_approval=False -> draft
    doctor / admin       -> submitted (direct)
    nurse                -> pending_approval (routed to a doctor)
    """
    if assign_to is not None:
        return IN_PROGRESS
    if route_for_approval is False:
        return DRAFT
    if actor.is_doctor or actor.is_admin:
        return SUBMITTED
    return PENDING_APPROVAL


def convert_to_draft_for_doctor_edit(*, source: str, actor: Actor) -> dict:
    """
    A doctor editing a pending_approval item takes it back to draft so they
    can then submit it themselves. Returns the fields the update must write.
    """
    require_transition(Operation.CONVERT_TO_DRAFT_FOR_DOCTOR_EDIT, source, DRAFT)
    return {
        "status": DRAFT,
        "converted_for_edit_by_id": actor.user_id,
    }
