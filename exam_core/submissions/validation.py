# exam_core/submissions/validation.py
from __future__ import annotations

from functools import lru_cache
from typing import Any, Protocol

from django.conf import settings
from django.utils.module_loading import import_string

from exam_core.common.exceptions import WorkflowValidationError
from exam_core.submissions.models import ExamType

DEFAULT_CONTENT_VALIDATOR = "exam_core.submissions.validation.StructuralContentValidator"


class ContentValidator(Protocol):
    """
    Pass/fail gate run before a submission may reach pending_approval or
    submitted. Raise WorkflowValidationError with one message per problem.
    """

    def validate(self, exam_type: str, form_data: Any) -> None: ...


class StructuralContentValidator:
    """
    Default gate: known exam type and an object-shaped form payload.
    Exam-specific fitness rules belong in a project-specific validator.
    """

    def validate(self, exam_type: str, form_data: Any) -> None:
        errors: list[str] = []
        if exam_type not in ExamType.values:
            errors.append(f"exam_type: unknown exam type '{exam_type}'.")
        if not isinstance(form_data, dict):
            errors.append("form_data: must be an object.")
        if errors:
            raise WorkflowValidationError(errors)


@lru_cache(maxsize=8)
def _load(path: str) -> ContentValidator:
    obj = import_string(path)
    return obj() if isinstance(obj, type) else obj


def get_content_validator() -> ContentValidator:
    return _load(getattr(settings, "SUBMISSIONS_CONTENT_VALIDATOR", DEFAULT_CONTENT_VALIDATOR))


def validate_content(exam_type: str, form_data: Any) -> None:
    get_content_validator().validate(exam_type, form_data)
