import uuid

from django.db import migrations, models


STATUS_CHOICES = [
    ("draft", "Draft"),
    ("pending_approval", "Pending Approval"),
    ("in_progress", "In Progress"),
    ("submitted", "Submitted"),
    ("rejected", "Rejected"),
]

EXAM_TYPE_CHOICES = [
    ("SIX_MONTHLY_MDW", "Six-monthly Medical Exam (MDW)"),
    ("SIX_MONTHLY_FMW", "Six-monthly Medical Exam (FMW)"),
    ("WORK_PERMIT", "Work Permit Medical Exam"),
    ("FULL_MEDICAL_EXAM", "Full Medical Exam"),
    ("AGED_DRIVERS", "Aged Drivers Exam"),
    ("DRIVING_LICENCE_TP", "Driving Licence (TP)"),
    ("DRIVING_VOCATIONAL_TP_LTA", "Driving + Vocational Licence (TP/LTA)"),
    ("VOCATIONAL_LICENCE_LTA", "Vocational Licence (LTA)"),
    ("DRIVING_LICENCE_TP_SHORT", "Driving Licence (TP), short form"),
    ("DRIVING_VOCATIONAL_TP_LTA_SHORT", "Driving + Vocational Licence, short form"),
    ("VOCATIONAL_LICENCE_LTA_SHORT", "Vocational Licence (LTA), short form"),
    ("PR_MEDICAL", "Permanent Residency Medical"),
    ("STUDENT_PASS_MEDICAL", "Student Pass Medical"),
    ("LTVP_MEDICAL", "Long-Term Visit Pass Medical"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Submission",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("clinic_id", models.UUIDField(db_index=True)),
                ("exam_type", models.CharField(choices=EXAM_TYPE_CHOICES, db_index=True, max_length=64)),
                ("form_data", models.JSONField(default=dict)),
                ("patient_name", models.CharField(max_length=255)),
                ("patient_identifier", models.CharField(db_index=True, max_length=32)),
                ("patient_passport_no", models.CharField(blank=True, default="", max_length=32)),
                ("patient_date_of_birth", models.DateField(blank=True, null=True)),
                ("patient_email", models.EmailField(blank=True, default="", max_length=254)),
                ("patient_mobile", models.CharField(blank=True, default="", max_length=32)),
                ("examination_date", models.DateField(blank=True, null=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="draft", max_length=32)),
                ("created_by_id", models.BigIntegerField(db_index=True)),
                ("assigned_doctor_id", models.BigIntegerField(blank=True, db_index=True, null=True)),
                ("assigned_to_id", models.BigIntegerField(blank=True, db_index=True, null=True)),
                ("assigned_to_role", models.CharField(blank=True, default="", max_length=16)),
                ("assigned_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_by_id", models.BigIntegerField(blank=True, null=True)),
                ("approved_by_id", models.BigIntegerField(blank=True, db_index=True, null=True)),
                ("approved_date", models.DateTimeField(blank=True, null=True)),
                ("submitted_date", models.DateTimeField(blank=True, null=True)),
                ("rejected_reason", models.TextField(blank=True, null=True)),
                ("last_reviewed_by_id", models.BigIntegerField(blank=True, null=True)),
                ("last_reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("converted_for_edit_by_id", models.BigIntegerField(blank=True, null=True)),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
            ],
            options={
                "db_table": "submissions_submission",
                "indexes": [
                    models.Index(fields=["clinic_id", "status", "created_at"], name="sub_clinic_status_created_idx"),
                    models.Index(fields=["clinic_id", "exam_type"], name="sub_clinic_exam_type_idx"),
                    models.Index(fields=["created_by_id", "status"], name="sub_creator_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("status__in", ["draft", "pending_approval", "in_progress", "submitted", "rejected"])
                        ),
                        name="ck_submission_status_valid",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("deleted_at__isnull", True), ("status", "draft"), _connector="OR"),
                        name="ck_submission_only_drafts_deleted",
                    ),
                ],
            },
        ),
    ]
