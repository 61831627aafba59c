# exam_core/approvals/api/serializers.py
from __future__ import annotations

from rest_framework import serializers


class ApproveSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RejectSerializer(serializers.Serializer):
    # blank reasons are rejected by ApprovalService with the workflow error shape
    reason = serializers.CharField(required=False, allow_blank=True, default="")
