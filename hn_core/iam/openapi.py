# hn_core/iam/openapi.py
from drf_spectacular.extensions import OpenApiAuthenticationExtension


class ContractsJWTScheme(OpenApiAuthenticationExtension):
    target_class = "hn_core.iam.auth.CookieOrHeaderJWTAuthentication"
    name = "BearerOrCookieJWT"

    def get_security_definition(self, auto_schema):
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Access token as `Authorization: Bearer <token>`, or the hn_access cookie set by /auth/login/.",
        }
