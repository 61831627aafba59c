# exam_core/common/permissions.py
from __future__ import annotations

from rest_framework.permissions import SAFE_METHODS, BasePermission

from exam_core.iam.models import StaffRole
from exam_core.iam.scope import actor_from_request

ROLE_ADMIN = StaffRole.ADMIN
ROLE_DOCTOR = StaffRole.DOCTOR
ROLE_NURSE = StaffRole.NURSE

ALL_STAFF = {ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE}


class BaseRolePermission(BasePermission):
    """
    Coarse role gate in front of a ViewSet.

    Key behavior:
    - Requires authentication and an active staff profile (resolves request.actor).
    - ADMIN bypass.
    - Uses allowed_roles_per_action for the rest.
    - Unknown SAFE action falls back to list/retrieve.

    Ownership and status rules are not checked here; the workflow policy
    decides those once the submission is loaded.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action: dict[str, set[str]] = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        # fallback inference when action isn't set
        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        # raises 403 (no profile / not a member) or 400 (malformed X-Clinic-Id)
        actor = actor_from_request(request)

        if actor.is_admin:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            allowed = self.allowed_roles_per_action.get("retrieve" if is_detail else "list")

        if allowed is not None:
            return actor.role in allowed

        # Unknown action => deny by default
        return False
