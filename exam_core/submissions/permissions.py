# exam_core/submissions/permissions.py
from __future__ import annotations

from exam_core.common.permissions import (
    ALL_STAFF,
    ROLE_ADMIN,
    ROLE_DOCTOR,
    ROLE_NURSE,
    BaseRolePermission,
)


class SubmissionPermission(BaseRolePermission):
    """Permissions for submission endpoints (ownership is checked by the policy)"""
    allowed_roles_per_action = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "create": ALL_STAFF,
        "update": ALL_STAFF,
        "partial_update": ALL_STAFF,
        "destroy": ALL_STAFF,
        # Custom actions
        "submit": ALL_STAFF,
        "assign": ALL_STAFF,
        "claim": {ROLE_DOCTOR, ROLE_NURSE},
        "submit_draft": {ROLE_ADMIN, ROLE_DOCTOR},
        "reopen": ALL_STAFF,
        "history": ALL_STAFF,
        "rejected": ALL_STAFF,
    }


class ApprovalPermission(BaseRolePermission):
    """Permissions for the doctor review queue"""
    allowed_roles_per_action = {
        "list": {ROLE_DOCTOR},
        "rejected": {ROLE_DOCTOR},
        "approve": {ROLE_DOCTOR},
        "reject": {ROLE_DOCTOR},
    }
