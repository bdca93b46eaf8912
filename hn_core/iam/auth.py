# hn_core/iam/auth.py

from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


def jwt_cookie_settings() -> dict:
    """
    Cookie options kept next to SIMPLE_JWT in settings.
    simplejwt itself does not know these keys.
    """
    cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    return {
        "access": cfg.get("AUTH_COOKIE", "hn_access"),
        "refresh": cfg.get("AUTH_COOKIE_REFRESH", "hn_refresh"),
        "secure": bool(cfg.get("AUTH_COOKIE_SECURE", False)),
        "samesite": cfg.get("AUTH_COOKIE_SAMESITE", "Lax"),
    }


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Bearer header first; otherwise the HttpOnly access cookie set at login.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
        else:
            raw_token = request.COOKIES.get(jwt_cookie_settings()["access"])

        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
