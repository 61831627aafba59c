# exam_core/iam/api/auth.py
from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from exam_core.iam.api.schema_serializers import (
    DetailResponseSerializer,
    LoginRequestSerializer,
    RefreshRequestSerializer,
    TokenPairResponseSerializer,
)


def _seconds(value: Any) -> int:
    """
    Convert a JWT lifetime setting into seconds.
    Supports timedelta OR int/float (already seconds).
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    try:
        return int(value)
    except (TypeError, ValueError):
        # 0 means "session cookie"
        return 0


def _set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}

    secure = bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False))
    samesite = jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax")

    for name, value, lifetime in (
        (jwt_cfg.get("AUTH_COOKIE", "exam_access"), access, jwt_cfg.get("ACCESS_TOKEN_LIFETIME")),
        (jwt_cfg.get("AUTH_COOKIE_REFRESH", "exam_refresh"), refresh, jwt_cfg.get("REFRESH_TOKEN_LIFETIME")),
    ):
        response.set_cookie(
            name,
            value,
            max_age=_seconds(lifetime),
            httponly=True,
            secure=secure,
            samesite=samesite,
            path="/",
        )


def _clear_auth_cookies(response: Response) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    response.delete_cookie(jwt_cfg.get("AUTH_COOKIE", "exam_access"), path="/")
    response.delete_cookie(jwt_cfg.get("AUTH_COOKIE_REFRESH", "exam_refresh"), path="/")


class TokenObtainView(APIView):
    """
    Issue an access/refresh pair. Tokens are returned in the body (Bearer
    clients) and set as HttpOnly cookies (browser clients).
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    www_authenticate_realm = "api"

    def get_authenticate_header(self, request):
        return f'Bearer realm="{self.www_authenticate_realm}"'

    @extend_schema(
        request=LoginRequestSerializer,
        responses={200: TokenPairResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        serializer = TokenObtainPairSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        access = serializer.validated_data["access"]
        refresh = serializer.validated_data["refresh"]

        res = Response({"access": access, "refresh": refresh}, status=status.HTTP_200_OK)
        _set_auth_cookies(res, access=access, refresh=refresh)
        return res


class TokenRefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    www_authenticate_realm = "api"

    def get_authenticate_header(self, request):
        return f'Bearer realm="{self.www_authenticate_realm}"'

    @extend_schema(
        request=RefreshRequestSerializer,
        responses={200: TokenPairResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
        refresh = request.data.get("refresh") or request.COOKIES.get(
            jwt_cfg.get("AUTH_COOKIE_REFRESH", "exam_refresh")
        )

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        serializer.is_valid(raise_exception=True)

        access = serializer.validated_data["access"]
        new_refresh = serializer.validated_data.get("refresh", refresh)

        res = Response({"access": access, "refresh": new_refresh}, status=status.HTTP_200_OK)
        _set_auth_cookies(res, access=access, refresh=new_refresh)
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=None,
        responses={200: DetailResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        _clear_auth_cookies(res)
        return res
