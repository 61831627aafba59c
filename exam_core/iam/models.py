# exam_core/iam/models.py
import uuid

from django.conf import settings
from django.db import models


class StaffRole(models.TextChoices):
    NURSE = "nurse", "Nurse"
    DOCTOR = "doctor", "Doctor"
    ADMIN = "admin", "Clinic Admin"


class StaffProfile(models.Model):
    """
    Clinic staff identity anchored to Django's AUTH_USER_MODEL.
    Carries the trusted role and the primary clinic a caller acts in.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="staff_profile")
    role = models.CharField(max_length=16, choices=StaffRole.choices, db_index=True)
    clinic_id = models.UUIDField(db_index=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_staff_profile"
        indexes = [
            models.Index(fields=["clinic_id", "role"], name="iam_staff_clinic_role_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user.username} ({self.role})"


class ClinicMembership(models.Model):
    """
    Additional clinics a staff member may act in (besides the primary clinic).
    Nurses covering several clinics are the usual case.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    profile = models.ForeignKey(StaffProfile, on_delete=models.CASCADE, related_name="memberships")
    clinic_id = models.UUIDField(db_index=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "iam_clinic_membership"
        constraints = [
            models.UniqueConstraint(fields=["profile", "clinic_id"], name="uq_clinic_membership_profile_clinic"),
        ]
