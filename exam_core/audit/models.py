# exam_core/audit/models.py
from django.db import models


class AuditEventType(models.TextChoices):
    CREATED = "created", "Created"
    SUBMITTED = "submitted", "Submitted"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    ASSIGNED = "assigned", "Assigned"
    REASSIGNED = "reassigned", "Reassigned"
    CLAIMED = "claimed", "Claimed"
    UPDATED = "updated", "Updated"
    DELETED = "deleted", "Deleted"


class ImmutableAuditLog(Exception):
    pass


class AuditLog(models.Model):
    """
    Immutable audit record for one workflow event on a submission.
    This is the ground-truth timeline; rows are appended and never edited.
    The auto-increment id doubles as the creation sequence.
    """
    id = models.BigAutoField(primary_key=True)

    submission = models.ForeignKey(
        "submissions.Submission",
        on_delete=models.PROTECT,
        related_name="audit_logs",
    )
    user_id = models.BigIntegerField(db_index=True)
    event_type = models.CharField(max_length=32, choices=AuditEventType.choices, db_index=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    changes = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_log"
        indexes = [
            models.Index(fields=["submission", "timestamp"], name="audit_submission_ts_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableAuditLog("Audit entries are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableAuditLog("Audit entries are append-only.")

    def __str__(self) -> str:
        return f"AuditLog({self.event_type}, {self.submission_id})"
