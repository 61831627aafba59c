# exam_core/approvals/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from exam_core.approvals.api.serializers import ApproveSerializer, RejectSerializer
from exam_core.approvals.selectors import list_pending_approvals, list_rejected_by_doctor
from exam_core.approvals.services import ApprovalService
from exam_core.common.api.pagination import QueuePagination
from exam_core.iam.scope import actor_from_request
from exam_core.submissions.api.serializers import (
    SubmissionPageSerializer,
    SubmissionSerializer,
    serialize_submission,
)
from exam_core.submissions.api.views import LIST_PARAMETERS, page_response
from exam_core.submissions.models import Submission
from exam_core.submissions.permissions import ApprovalPermission


class ApprovalViewSet(viewsets.ViewSet):
    """
    Doctor review queue.

    GET  /approvals/                  pending_approval items for the current clinic
    GET  /approvals/rejected/         rejections made by (or routed to) the doctor
    POST /approvals/{id}/approve/
    POST /approvals/{id}/reject/
    """
    permission_classes = [ApprovalPermission]
    serializer_class = SubmissionSerializer
    queryset = Submission.objects.none()

    @extend_schema(tags=["Approvals"], parameters=LIST_PARAMETERS, responses={200: SubmissionPageSerializer})
    def list(self, request):
        actor = actor_from_request(request)
        qs = list_pending_approvals(actor=actor, params=request.query_params)
        return page_response(request, qs, paginator=QueuePagination())

    @extend_schema(tags=["Approvals"], parameters=LIST_PARAMETERS, responses={200: SubmissionPageSerializer})
    @action(detail=False, methods=["get"], url_path="rejected")
    def rejected(self, request):
        actor = actor_from_request(request)
        qs = list_rejected_by_doctor(actor=actor, params=request.query_params)
        return page_response(request, qs, paginator=QueuePagination())

    @extend_schema(tags=["Approvals"], request=ApproveSerializer, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        actor = actor_from_request(request)
        ser = ApproveSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        submission = ApprovalService.approve(actor=actor, submission_id=pk, notes=ser.validated_data["notes"])
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)

    @extend_schema(tags=["Approvals"], request=RejectSerializer, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        actor = actor_from_request(request)
        ser = RejectSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        submission = ApprovalService.reject(actor=actor, submission_id=pk, reason=ser.validated_data["reason"])
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)
