# exam_core/submissions/admin.py
from __future__ import annotations

from django.contrib import admin

from exam_core.submissions.models import Submission


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    """
    Read-mostly view. Workflow fields change only through the services,
    so everything the engine owns is read-only here.
    """
    list_display = (
        "id",
        "clinic_id",
        "exam_type",
        "status",
        "created_by_id",
        "assigned_to_id",
        "approved_by_id",
        "created_at",
        "deleted_at",
    )
    list_filter = ("status", "exam_type")
    search_fields = ("id", "patient_identifier", "clinic_id")
    readonly_fields = (
        "id",
        "status",
        "created_by_id",
        "assigned_doctor_id",
        "assigned_to_id",
        "assigned_to_role",
        "assigned_at",
        "assigned_by_id",
        "approved_by_id",
        "approved_date",
        "submitted_date",
        "rejected_reason",
        "last_reviewed_by_id",
        "last_reviewed_at",
        "converted_for_edit_by_id",
        "deleted_at",
        "created_at",
        "updated_at",
    )
    ordering = ("-created_at",)
