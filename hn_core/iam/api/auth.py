# hn_core/iam/api/auth.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.settings import api_settings as jwt_settings

from hn_core.common.permissions import user_roles
from hn_core.iam.api.schema_serializers import DetailResponseSerializer, LoginRequestSerializer, LoginResponseSerializer
from hn_core.iam.auth import jwt_cookie_settings


def _write_cookie(response: Response, name: str, value: str, lifetime) -> None:
    cookie = jwt_cookie_settings()
    response.set_cookie(
        name,
        value,
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        secure=cookie["secure"],
        samesite=cookie["samesite"],
        path="/",
    )


def attach_tokens(response: Response, *, access: str, refresh: str | None) -> Response:
    cookie = jwt_cookie_settings()
    _write_cookie(response, cookie["access"], access, jwt_settings.ACCESS_TOKEN_LIFETIME)
    if refresh:
        _write_cookie(response, cookie["refresh"], refresh, jwt_settings.REFRESH_TOKEN_LIFETIME)
    return response


class LoginView(APIView):
    """
    Username/password login. Tokens travel only as HttpOnly cookies; the body
    tells the client which actor_role values it may send on contract actions.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=LoginRequestSerializer, responses={200: LoginResponseSerializer}, tags=["IAM"])
    def post(self, request):
        serializer = TokenObtainPairSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        body = {"detail": "login ok", "roles": sorted(user_roles(serializer.user))}
        return attach_tokens(
            Response(body, status=status.HTTP_200_OK),
            access=serializer.validated_data["access"],
            refresh=serializer.validated_data["refresh"],
        )


class RefreshView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        refresh = request.COOKIES.get(jwt_cookie_settings()["refresh"])
        if not refresh:
            raise NotAuthenticated("Refresh cookie missing.")

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        serializer.is_valid(raise_exception=True)

        return attach_tokens(
            Response({"detail": "refreshed"}, status=status.HTTP_200_OK),
            access=serializer.validated_data["access"],
            refresh=serializer.validated_data.get("refresh"),
        )


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        cookie = jwt_cookie_settings()
        response = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        response.delete_cookie(cookie["access"], path="/")
        response.delete_cookie(cookie["refresh"], path="/")
        return response
