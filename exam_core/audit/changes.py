# exam_core/audit/changes.py
"""
Typed payloads for AuditLog.changes.

One frozen dataclass per event type. Each validates its own shape on
construction, so a malformed audit entry fails before anything is written.
`as_dict()` is what lands in the JSON column (None values are omitted).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Optional, Union

from exam_core.audit.models import AuditEventType
from exam_core.iam.models import StaffRole
from exam_core.submissions.models import ExamType, SubmissionStatus

ASSIGNABLE_ROLES = (StaffRole.DOCTOR, StaffRole.NURSE)


class InvalidAuditChanges(ValueError):
    pass


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise InvalidAuditChanges(msg)


def _is_status(value: Any) -> bool:
    return value in SubmissionStatus.values


class _Changes:
    event_type: ClassVar[str]

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for k, v in asdict(self).items():
            if v is None:
                continue
            out[k] = list(v) if isinstance(v, tuple) else v
        return out


@dataclass(frozen=True)
class Created(_Changes):
    event_type: ClassVar[str] = AuditEventType.CREATED

    status: str
    exam_type: str

    def __post_init__(self):
        _require(_is_status(self.status), f"Unknown status: {self.status!r}")
        _require(self.exam_type in ExamType.values, f"Unknown exam type: {self.exam_type!r}")


@dataclass(frozen=True)
class Submitted(_Changes):
    """
    Emitted when a submission reaches `submitted`, and also for the
    nurse routing event into `pending_approval`.
    """
    event_type: ClassVar[str] = AuditEventType.SUBMITTED

    status: str
    agency: Optional[str] = None

    def __post_init__(self):
        _require(
            self.status in (SubmissionStatus.SUBMITTED, SubmissionStatus.PENDING_APPROVAL),
            f"Submitted event cannot carry status {self.status!r}",
        )


@dataclass(frozen=True)
class Approved(_Changes):
    event_type: ClassVar[str] = AuditEventType.APPROVED

    notes: str = ""

    def __post_init__(self):
        _require(isinstance(self.notes, str), "notes must be a string")


@dataclass(frozen=True)
class Rejected(_Changes):
    event_type: ClassVar[str] = AuditEventType.REJECTED

    reason: str

    def __post_init__(self):
        _require(isinstance(self.reason, str) and bool(self.reason.strip()), "reason is required")


@dataclass(frozen=True)
class Assigned(_Changes):
    event_type: ClassVar[str] = AuditEventType.ASSIGNED

    assigned_to_id: int
    assigned_to_name: str
    assigned_to_role: str
    note: Optional[str] = None

    def __post_init__(self):
        _require(isinstance(self.assigned_to_id, int), "assigned_to_id must be an int")
        _require(self.assigned_to_role in ASSIGNABLE_ROLES, f"Cannot assign to role {self.assigned_to_role!r}")


@dataclass(frozen=True)
class Reassigned(_Changes):
    event_type: ClassVar[str] = AuditEventType.REASSIGNED

    assigned_to_id: int
    assigned_to_name: str
    assigned_to_role: str
    previous_assigned_to_id: Optional[int] = None
    note: Optional[str] = None

    def __post_init__(self):
        _require(isinstance(self.assigned_to_id, int), "assigned_to_id must be an int")
        _require(self.assigned_to_role in ASSIGNABLE_ROLES, f"Cannot assign to role {self.assigned_to_role!r}")


@dataclass(frozen=True)
class Claimed(_Changes):
    event_type: ClassVar[str] = AuditEventType.CLAIMED

    assigned_to_id: int

    def __post_init__(self):
        _require(isinstance(self.assigned_to_id, int), "assigned_to_id must be an int")


@dataclass(frozen=True)
class Updated(_Changes):
    """
    Field edits, the doctor-edit conversion and reopen all land here.
    `action` names the non-edit cases ("converted_for_doctor_edit", "reopened").
    """
    event_type: ClassVar[str] = AuditEventType.UPDATED

    fields: tuple[str, ...] = field(default_factory=tuple)
    action: Optional[str] = None
    previous_status: Optional[str] = None
    new_status: Optional[str] = None

    def __post_init__(self):
        _require(all(isinstance(f, str) for f in self.fields), "fields must be strings")
        if self.previous_status is not None:
            _require(_is_status(self.previous_status), f"Unknown status: {self.previous_status!r}")
        if self.new_status is not None:
            _require(_is_status(self.new_status), f"Unknown status: {self.new_status!r}")
        _require(
            bool(self.fields) or self.action is not None or self.new_status is not None,
            "Updated event must describe what changed",
        )


@dataclass(frozen=True)
class Deleted(_Changes):
    event_type: ClassVar[str] = AuditEventType.DELETED

    patient_name: str
    exam_type: str

    def __post_init__(self):
        _require(self.exam_type in ExamType.values, f"Unknown exam type: {self.exam_type!r}")


AuditChanges = Union[
    Created,
    Submitted,
    Approved,
    Rejected,
    Assigned,
    Reassigned,
    Claimed,
    Updated,
    Deleted,
]
