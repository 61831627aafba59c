# exam_core/audit/admin.py
from django.contrib import admin

from exam_core.audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "submission",
        "event_type",
        "user_id",
        "timestamp",
    )
    list_filter = ("event_type",)
    search_fields = ("submission__id", "user_id")
    readonly_fields = ("id", "submission", "user_id", "event_type", "timestamp", "changes")
    ordering = ("-timestamp",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
