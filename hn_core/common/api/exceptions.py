# hn_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"

# First match wins; APIException subclasses fall back to their default_code
_CODES_BY_TYPE: tuple[tuple[type, str], ...] = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (PermissionDenied, "permission_denied"),
    (Http404, "not_found"),
)


def ensure_request_id(request) -> str:
    """
    Return the request's id, assigning one on first use.
    An inbound X-Request-Id header is reused so callers can correlate.
    """
    if request is None:
        return uuid.uuid4().hex

    rid = getattr(request, "request_id", None) or request.META.get("HTTP_X_REQUEST_ID") or uuid.uuid4().hex
    request.request_id = rid
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": ensure_request_id(request),
        }
    }


def _code_for(exc: Exception) -> str:
    for exc_type, code in _CODES_BY_TYPE:
        if isinstance(exc, exc_type):
            return code
    return getattr(exc, "default_code", None) or "api_error"


def _message_and_details(data: Any) -> tuple[str, Any]:
    """
    {"detail": msg}            -> (msg, None)
    {"detail": msg, **rest}    -> (msg, rest)   e.g. typed workflow errors with a reason
    anything else              -> ("Request failed.", data)   e.g. serializer field errors
    """
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), rest or None
    return "Request failed.", data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(detail=exc.message_dict if hasattr(exc, "error_dict") else exc.messages)

    response = drf_exception_handler(exc, context)

    if response is None:
        if isinstance(exc, DatabaseError):
            logger.exception("database_unavailable", extra={"request_id": ensure_request_id(request)})
            return Response(
                build_error_envelope(
                    request=request,
                    code="storage_error",
                    message="Storage is unavailable; retry later.",
                ),
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        logger.exception("unhandled_api_error", extra={"request_id": ensure_request_id(request)})
        return Response(
            build_error_envelope(request=request, code="server_error", message="Unexpected server error."),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    message, details = _message_and_details(response.data)
    if response.status_code >= 500:
        logger.error(
            "api_error",
            extra={"request_id": ensure_request_id(request), "status_code": response.status_code},
        )

    return Response(
        build_error_envelope(request=request, code=_code_for(exc), message=message, details=details),
        status=response.status_code,
        headers=response.headers,
    )
