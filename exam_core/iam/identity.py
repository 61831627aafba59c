# exam_core/iam/identity.py
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from exam_core.iam.models import StaffRole


@dataclass(frozen=True)
class Actor:
    """
    Trusted caller identity handed to the workflow engine.
    """
    user_id: int
    role: str
    clinic_id: UUID

    @property
    def is_admin(self) -> bool:
        return self.role == StaffRole.ADMIN

    @property
    def is_doctor(self) -> bool:
        return self.role == StaffRole.DOCTOR

    @property
    def is_nurse(self) -> bool:
        return self.role == StaffRole.NURSE
