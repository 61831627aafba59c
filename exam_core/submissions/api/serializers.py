# exam_core/submissions/api/serializers.py
from __future__ import annotations

from typing import Iterable

from rest_framework import serializers

from exam_core.iam.services.directory import display_names
from exam_core.submissions.models import ExamType, Submission

USER_REF_FIELDS = ("created_by_id", "approved_by_id", "assigned_doctor_id", "assigned_to_id")


class SubmissionSerializer(serializers.ModelSerializer):
    """
    Read shape. Display names come from context["names"] ({user_id: name})
    so a page of rows resolves them with one query.
    """
    created_date = serializers.DateTimeField(source="created_at", read_only=True)
    created_by_name = serializers.SerializerMethodField()
    approved_by_name = serializers.SerializerMethodField()
    assigned_doctor_name = serializers.SerializerMethodField()
    assigned_to_name = serializers.SerializerMethodField()

    class Meta:
        model = Submission
        fields = [
            "id",
            "clinic_id",
            "exam_type",
            "form_data",
            "patient_name",
            "patient_identifier",
            "patient_passport_no",
            "patient_date_of_birth",
            "patient_email",
            "patient_mobile",
            "examination_date",
            "status",
            "created_by_id",
            "created_by_name",
            "created_date",
            "updated_at",
            "assigned_doctor_id",
            "assigned_doctor_name",
            "assigned_to_id",
            "assigned_to_name",
            "assigned_to_role",
            "assigned_at",
            "assigned_by_id",
            "approved_by_id",
            "approved_by_name",
            "approved_date",
            "submitted_date",
            "rejected_reason",
            "last_reviewed_by_id",
            "last_reviewed_at",
            "deleted_at",
        ]

    def _name(self, user_id):
        if user_id is None:
            return None
        return (self.context.get("names") or {}).get(user_id)

    def get_created_by_name(self, obj):
        return self._name(obj.created_by_id)

    def get_approved_by_name(self, obj):
        return self._name(obj.approved_by_id)

    def get_assigned_doctor_name(self, obj):
        return self._name(obj.assigned_doctor_id)

    def get_assigned_to_name(self, obj):
        return self._name(obj.assigned_to_id)


def serialize_submissions(items: Iterable[Submission]) -> list[dict]:
    items = list(items)
    ids = {getattr(s, f) for s in items for f in USER_REF_FIELDS}
    return SubmissionSerializer(items, many=True, context={"names": display_names(ids)}).data


def serialize_submission(submission: Submission) -> dict:
    return serialize_submissions([submission])[0]


class _SubmissionFieldsSerializer(serializers.Serializer):
    exam_type = serializers.ChoiceField(choices=ExamType.choices)
    patient_name = serializers.CharField(max_length=255)
    patient_identifier = serializers.CharField(max_length=32)
    patient_passport_no = serializers.CharField(max_length=32, required=False, allow_blank=True)
    patient_date_of_birth = serializers.DateField(required=False, allow_null=True)
    patient_email = serializers.EmailField(required=False, allow_blank=True)
    patient_mobile = serializers.CharField(max_length=32, required=False, allow_blank=True)
    examination_date = serializers.DateField(required=False, allow_null=True)
    form_data = serializers.JSONField()
    assigned_doctor_id = serializers.IntegerField(required=False, allow_null=True)
    assign_to = serializers.IntegerField(required=False, allow_null=True)
    note = serializers.CharField(required=False, allow_blank=True)

    def validate_form_data(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Must be an object.")
        return value


class SubmissionCreateSerializer(_SubmissionFieldsSerializer):
    route_for_approval = serializers.BooleanField(required=False, allow_null=True)


class SubmissionUpdateSerializer(_SubmissionFieldsSerializer):
    """Used with partial=True: every field optional."""


class AssignSerializer(serializers.Serializer):
    assign_to = serializers.IntegerField()
    note = serializers.CharField(required=False, allow_blank=True)


class ActionResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()


class PaginationSerializer(serializers.Serializer):
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    total_pages = serializers.IntegerField()
    total_items = serializers.IntegerField()
    has_next = serializers.BooleanField()
    has_previous = serializers.BooleanField()


class SubmissionPageSerializer(serializers.Serializer):
    data = SubmissionSerializer(many=True)
    pagination = PaginationSerializer()


class HistoryEventSerializer(serializers.Serializer):
    timestamp = serializers.DateTimeField()
    event_type = serializers.CharField()
    user_id = serializers.IntegerField()
    user_name = serializers.CharField()
    details = serializers.DictField()


class HistorySerializer(serializers.Serializer):
    submission_id = serializers.UUIDField()
    events = HistoryEventSerializer(many=True)
