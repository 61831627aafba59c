import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("submissions", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("user_id", models.BigIntegerField(db_index=True)),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("created", "Created"),
                            ("submitted", "Submitted"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("assigned", "Assigned"),
                            ("reassigned", "Reassigned"),
                            ("claimed", "Claimed"),
                            ("updated", "Updated"),
                            ("deleted", "Deleted"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("changes", models.JSONField(default=dict)),
                (
                    "submission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="audit_logs",
                        to="submissions.submission",
                    ),
                ),
            ],
            options={
                "db_table": "audit_audit_log",
                "indexes": [models.Index(fields=["submission", "timestamp"], name="audit_submission_ts_idx")],
            },
        ),
    ]
