# exam_core/audit/services.py
from __future__ import annotations

import logging
from uuid import UUID

from django.db import DatabaseError, transaction

from exam_core.audit.changes import AuditChanges
from exam_core.audit.models import AuditLog
from exam_core.common.exceptions import AuditWriteError

logger = logging.getLogger(__name__)


class AuditService:
    """
    Central audit writer.
    Called inside the workflow transaction, after the state write.
    A failed write is fatal: it surfaces as AuditWriteError and the caller's
    transaction rolls back with it.
    """

    @staticmethod
    @transaction.atomic
    def record(*, submission_id: UUID, user_id: int, changes: AuditChanges) -> AuditLog:
        try:
            return AuditLog.objects.create(
                submission_id=submission_id,
                user_id=int(user_id),
                event_type=changes.event_type,
                changes=changes.as_dict(),
            )
        except DatabaseError as exc:
            logger.warning(
                "audit write failed submission=%s event=%s",
                submission_id,
                changes.event_type,
            )
            raise AuditWriteError() from exc
