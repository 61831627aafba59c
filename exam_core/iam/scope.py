# exam_core/iam/scope.py
from __future__ import annotations

from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

from exam_core.iam.identity import Actor
from exam_core.iam.models import StaffProfile
from exam_core.iam.services.directory import is_member_of_clinic

# Preferred header name (what we standardize on)
HDR_CLINIC = "X-Clinic-Id"

INVALID_SCOPE_MSG = "Invalid scope header. Provide a valid UUID for X-Clinic-Id."
NO_PROFILE_MSG = "No active staff profile for this user."
NOT_MEMBER_MSG = "You do not have access to the selected clinic."


def _get_header(request, name: str) -> str | None:
    """
    request.headers is case-insensitive; fallback to META for pytest/client.
    """
    try:
        v = request.headers.get(name)
        if v:
            return v
    except AttributeError:
        pass
    return request.META.get("HTTP_" + name.upper().replace("-", "_"))


def resolve_clinic_from_headers(request) -> UUID | None:
    raw = _get_header(request, HDR_CLINIC)
    if not raw:
        return None
    try:
        return UUID(str(raw))
    except ValueError:
        raise ValidationError({HDR_CLINIC: INVALID_SCOPE_MSG})


def actor_from_request(request) -> Actor:
    """
    Build the trusted Actor for the authenticated user.

    - role and primary clinic come from the StaffProfile (no profile -> 403)
    - X-Clinic-Id selects another clinic the user is a member of
    - cached on the request so permission classes and views agree
    """
    cached = getattr(request, "actor", None)
    if cached is not None:
        return cached

    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required.")

    profile = StaffProfile.objects.filter(user_id=user.id, is_active=True).first()
    if profile is None:
        raise PermissionDenied(NO_PROFILE_MSG)

    clinic_id = resolve_clinic_from_headers(request) or profile.clinic_id
    if clinic_id != profile.clinic_id and not is_member_of_clinic(user_id=user.id, clinic_id=clinic_id):
        raise PermissionDenied(NOT_MEMBER_MSG)

    actor = Actor(user_id=user.id, role=profile.role, clinic_id=clinic_id)
    request.actor = actor
    request.clinic_id = clinic_id
    return actor
