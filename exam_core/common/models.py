# exam_core/common/models.py
from __future__ import annotations

import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ClinicScopedModel(TimeStampedModel):
    """
    Enforces clinic (tenant) scope at the data layer.
    Every row belongs to exactly one clinic; queries are filtered by clinic_id
    unless the caller is allowed cross-clinic visibility.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    clinic_id = models.UUIDField(db_index=True)

    class Meta:
        abstract = True
