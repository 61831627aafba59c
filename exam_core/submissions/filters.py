# exam_core/submissions/filters.py
from __future__ import annotations

import django_filters

from exam_core.submissions.models import ExamType, Submission, SubmissionStatus


class SubmissionFilter(django_filters.FilterSet):
    """
    Query-string filters shared by the submission and approval listings.
    from_date / to_date are inclusive calendar days on created_date.
    """
    status = django_filters.ChoiceFilter(choices=SubmissionStatus.choices)
    exam_type = django_filters.ChoiceFilter(choices=ExamType.choices)
    patient_name = django_filters.CharFilter(field_name="patient_name", lookup_expr="icontains")
    patient_identifier = django_filters.CharFilter(field_name="patient_identifier", lookup_expr="exact")
    from_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    to_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Submission
        fields = ["status", "exam_type", "patient_name", "patient_identifier", "from_date", "to_date"]
