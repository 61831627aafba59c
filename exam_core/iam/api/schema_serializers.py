# exam_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()


class TokenPairResponseSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()


class RefreshRequestSerializer(serializers.Serializer):
    # falls back to the refresh cookie when omitted
    refresh = serializers.CharField(required=False)


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField(allow_null=True, required=False)
    email = serializers.EmailField(allow_null=True, required=False)
    name = serializers.CharField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    role = serializers.CharField()
    clinic_id = serializers.UUIDField()
    active_clinic_id = serializers.UUIDField()
    clinic_ids = serializers.ListField(child=serializers.UUIDField())
