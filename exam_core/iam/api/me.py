# exam_core/iam/api/me.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from exam_core.iam.api.schema_serializers import MeResponseSerializer
from exam_core.iam.scope import actor_from_request
from exam_core.iam.services.directory import get_staff_member, list_clinic_ids


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["Auth"])
    def get(self, request):
        """
        Staff identity for the caller plus every clinic they may act in.
        X-Clinic-Id is optional here; when present it must be one of those clinics.
        """
        actor = actor_from_request(request)
        member = get_staff_member(actor.user_id)

        return Response(
            {
                "user": {
                    "id": request.user.id,
                    "username": getattr(request.user, "username", None),
                    "email": getattr(request.user, "email", None),
                    "name": member.display_name if member else "",
                },
                "role": actor.role,
                "clinic_id": str(member.clinic_id) if member else str(actor.clinic_id),
                "active_clinic_id": str(actor.clinic_id),
                "clinic_ids": [str(c) for c in list_clinic_ids(actor.user_id)],
            },
            status=status.HTTP_200_OK,
        )
