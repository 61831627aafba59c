import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StaffProfile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "role",
                    models.CharField(
                        choices=[("nurse", "Nurse"), ("doctor", "Doctor"), ("admin", "Clinic Admin")],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("clinic_id", models.UUIDField(db_index=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "iam_staff_profile",
                "indexes": [models.Index(fields=["clinic_id", "role"], name="iam_staff_clinic_role_idx")],
            },
        ),
        migrations.CreateModel(
            name="ClinicMembership",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("clinic_id", models.UUIDField(db_index=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "profile",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="iam.staffprofile",
                    ),
                ),
            ],
            options={
                "db_table": "iam_clinic_membership",
                "constraints": [
                    models.UniqueConstraint(fields=("profile", "clinic_id"), name="uq_clinic_membership_profile_clinic"),
                ],
            },
        ),
    ]
