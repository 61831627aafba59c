# exam_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from exam_core.approvals.api.views import ApprovalViewSet
from exam_core.iam.api.auth import LogoutView, TokenObtainView, TokenRefreshView
from exam_core.iam.api.me import MeView
from exam_core.submissions.api.views import SubmissionViewSet

router = DefaultRouter()

router.register(r"submissions", SubmissionViewSet, basename="submissions")
router.register(r"approvals", ApprovalViewSet, basename="approvals")

urlpatterns = [
    # Auth + /me
    path("auth/token/", TokenObtainView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
