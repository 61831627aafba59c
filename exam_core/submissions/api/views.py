# exam_core/submissions/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from exam_core.audit.selectors import history as audit_history
from exam_core.common.api.pagination import QueuePagination, paginate
from exam_core.iam.scope import actor_from_request
from exam_core.submissions.api.serializers import (
    ActionResultSerializer,
    AssignSerializer,
    HistorySerializer,
    SubmissionCreateSerializer,
    SubmissionPageSerializer,
    SubmissionSerializer,
    SubmissionUpdateSerializer,
    serialize_submission,
    serialize_submissions,
)
from exam_core.submissions.models import Submission
from exam_core.submissions.permissions import SubmissionPermission
from exam_core.submissions.selectors import SubmissionSelector
from exam_core.submissions.services import SubmissionService

LIST_PARAMETERS = [
    OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False,
                     description="Filter by status. Drafts are listed only with status=draft."),
    OpenApiParameter("exam_type", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("patient_name", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False,
                     description="Case-insensitive contains."),
    OpenApiParameter("patient_identifier", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("from_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("to_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False,
                     description="Page size (default 20, 50 on work queues, max 100)."),
]


def page_response(request, queryset, *, paginator=None) -> Response:
    return paginate(request, queryset, serialize_submissions, paginator=paginator)


class SubmissionViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - resolves the caller (Actor) from the staff profile
    - validates request shape
    - calls selectors for reads, services for writes
    Workflow errors propagate to the global exception handler.
    """
    permission_classes = [SubmissionPermission]
    serializer_class = SubmissionSerializer
    queryset = Submission.objects.none()

    # ----------------------------
    # Reads
    # ----------------------------
    @extend_schema(
        tags=["Submissions"],
        parameters=LIST_PARAMETERS + [
            OpenApiParameter("include_deleted", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False,
                             description="Admins only: include soft-deleted drafts."),
        ],
        responses={200: SubmissionPageSerializer},
    )
    def list(self, request):
        actor = actor_from_request(request)
        qs = SubmissionSelector.list_submissions(actor=actor, params=request.query_params)
        return page_response(request, qs)

    @extend_schema(tags=["Submissions"], responses={200: SubmissionSerializer})
    def retrieve(self, request, pk=None):
        actor = actor_from_request(request)
        submission = SubmissionSelector.get_submission(actor=actor, submission_id=pk)
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], parameters=LIST_PARAMETERS, responses={200: SubmissionPageSerializer})
    @action(detail=False, methods=["get"], url_path="rejected")
    def rejected(self, request):
        actor = actor_from_request(request)
        qs = SubmissionSelector.list_rejected_for_creator(actor=actor, params=request.query_params)
        return page_response(request, qs, paginator=QueuePagination())

    @extend_schema(
        tags=["Submissions"],
        parameters=[
            OpenApiParameter("order", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False,
                             enum=["asc", "desc"], description="Default asc (oldest first)."),
        ],
        responses={200: HistorySerializer},
    )
    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        actor = actor_from_request(request)
        submission = SubmissionSelector.get_submission(actor=actor, submission_id=pk)
        data = audit_history(submission_id=submission.id, order=request.query_params.get("order") or "asc")
        return Response(data, status=status.HTTP_200_OK)

    # ----------------------------
    # Writes
    # ----------------------------
    @extend_schema(tags=["Submissions"], request=SubmissionCreateSerializer, responses={201: SubmissionSerializer})
    def create(self, request):
        actor = actor_from_request(request)
        ser = SubmissionCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        submission = SubmissionService.create(actor=actor, data=ser.validated_data)
        return Response(serialize_submission(submission), status=status.HTTP_201_CREATED)

    def _update(self, request, pk):
        actor = actor_from_request(request)
        ser = SubmissionUpdateSerializer(data=request.data or {}, partial=True)
        ser.is_valid(raise_exception=True)

        submission = SubmissionService.update(actor=actor, submission_id=pk, patch=ser.validated_data)
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], request=SubmissionUpdateSerializer, responses={200: SubmissionSerializer})
    def update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Submissions"], request=SubmissionUpdateSerializer, responses={200: SubmissionSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Submissions"], responses={200: ActionResultSerializer})
    def destroy(self, request, pk=None):
        actor = actor_from_request(request)
        result = SubmissionService.delete(actor=actor, submission_id=pk)
        return Response(result, status=status.HTTP_200_OK)

    # ----------------------------
    # Workflow actions
    # ----------------------------
    @extend_schema(tags=["Submissions"], request=None, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request, pk=None):
        actor = actor_from_request(request)
        submission = SubmissionService.submit_for_approval(actor=actor, submission_id=pk)
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], request=AssignSerializer, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"], url_path="assign")
    def assign(self, request, pk=None):
        actor = actor_from_request(request)
        ser = AssignSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        submission = SubmissionService.assign(
            actor=actor,
            submission_id=pk,
            assign_to=ser.validated_data["assign_to"],
            note=ser.validated_data.get("note"),
        )
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], request=None, responses={200: ActionResultSerializer})
    @action(detail=True, methods=["post"], url_path="claim")
    def claim(self, request, pk=None):
        actor = actor_from_request(request)
        result = SubmissionService.claim(actor=actor, submission_id=pk)
        return Response(result, status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], request=None, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"], url_path="submit-draft")
    def submit_draft(self, request, pk=None):
        actor = actor_from_request(request)
        submission = SubmissionService.submit_collaborative_draft(actor=actor, submission_id=pk)
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], request=None, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"], url_path="reopen")
    def reopen(self, request, pk=None):
        actor = actor_from_request(request)
        submission = SubmissionService.reopen(actor=actor, submission_id=pk)
        return Response(serialize_submission(submission), status=status.HTTP_200_OK)
