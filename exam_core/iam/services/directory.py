# exam_core/iam/services/directory.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional
from uuid import UUID

from django.contrib.auth import get_user_model

from exam_core.iam.models import ClinicMembership, StaffProfile


@dataclass(frozen=True)
class StaffMember:
    user_id: int
    role: str
    clinic_id: UUID
    display_name: str


def _display_name(user) -> str:
    full = (user.get_full_name() or "").strip() if hasattr(user, "get_full_name") else ""
    return full or user.get_username()


def get_staff_member(user_id: int) -> Optional[StaffMember]:
    """
    Resolve an active staff member by Django user id. Returns None when the
    user does not exist, is inactive, or has no staff profile.
    """
    profile = (
        StaffProfile.objects.select_related("user")
        .filter(user_id=user_id, is_active=True, user__is_active=True)
        .first()
    )
    if profile is None:
        return None
    return StaffMember(
        user_id=profile.user_id,
        role=profile.role,
        clinic_id=profile.clinic_id,
        display_name=_display_name(profile.user),
    )


def is_member_of_clinic(*, user_id: int, clinic_id: UUID) -> bool:
    """
    Primary clinic or an active additional membership.
    This is the single source of truth used by clinic scope enforcement.
    """
    if StaffProfile.objects.filter(user_id=user_id, is_active=True, clinic_id=clinic_id).exists():
        return True
    return ClinicMembership.objects.filter(
        is_active=True,
        clinic_id=clinic_id,
        profile__user_id=user_id,
        profile__is_active=True,
    ).exists()


def list_clinic_ids(user_id: int) -> list[UUID]:
    """
    Primary clinic first, then additional active memberships.
    """
    profile = StaffProfile.objects.filter(user_id=user_id, is_active=True).first()
    if profile is None:
        return []
    extra = (
        ClinicMembership.objects.filter(profile=profile, is_active=True)
        .exclude(clinic_id=profile.clinic_id)
        .order_by("created_at")
        .values_list("clinic_id", flat=True)
    )
    return [profile.clinic_id, *extra]


def display_names(user_ids: Iterable[int]) -> dict[int, str]:
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    User = get_user_model()
    return {u.pk: _display_name(u) for u in User.objects.filter(pk__in=ids)}
