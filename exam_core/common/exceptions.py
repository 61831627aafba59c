# exam_core/common/exceptions.py
from __future__ import annotations

from typing import Iterable


class WorkflowError(Exception):
    """
    Base class for every failure raised by the submission workflow engine.
    The API layer maps subclasses to HTTP status codes; services never catch them.
    """
    default_message = "Workflow operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SubmissionNotFound(WorkflowError):
    """
    Id does not resolve to a visible record. Used instead of a forbidden
    response whenever answering would leak the record's existence.
    """
    default_message = "Submission not found."


class WorkflowForbidden(WorkflowError):
    """
    Caller is authenticated but may not perform this operation, either
    because of role/ownership or because the submission's status is outside
    the operation's valid-from set.
    """
    default_message = "You do not have permission to perform this action."


class WorkflowValidationError(WorkflowError):
    """
    Payload rejected by the content validator, or a transition precondition
    (target user, reason, ...) is unmet.
    """
    default_message = "Validation failed."

    def __init__(self, messages: Iterable[str] | str | None = None):
        if messages is None:
            msgs: list[str] = [self.default_message]
        elif isinstance(messages, str):
            msgs = [messages]
        else:
            msgs = [str(m) for m in messages] or [self.default_message]
        self.messages = msgs
        super().__init__(msgs[0] if len(msgs) == 1 else self.default_message)


class WorkflowConflict(WorkflowError):
    """
    The conditional update matched no row: the submission changed between
    read and write. Callers may refetch and retry.
    """
    default_message = "Submission was modified concurrently. Refresh and try again."


class AuditWriteError(WorkflowError):
    """
    The audit entry for a state change could not be persisted.
    Fatal for the operation; the surrounding transaction is rolled back.
    """
    default_message = "Audit trail could not be written."
