# exam_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from exam_core.iam.models import ClinicMembership, StaffProfile


class ClinicMembershipInline(admin.TabularInline):
    model = ClinicMembership
    extra = 0


@admin.register(StaffProfile)
class StaffProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "role", "clinic_id", "is_active", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("user__username", "user__email", "clinic_id")
    inlines = [ClinicMembershipInline]
    ordering = ("-created_at",)
