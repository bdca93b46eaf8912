# hn_core/common/middleware.py
from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from hn_core.common.api.exceptions import REQUEST_ID_HEADER, ensure_request_id


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (inbound X-Request-Id or a fresh uuid4 hex)
    and echoes it on every response so clients can correlate error envelopes
    and server logs.
    """

    def process_request(self, request):
        ensure_request_id(request)
        return None

    def process_response(self, request, response):
        rid = ensure_request_id(request)
        if not response.has_header(REQUEST_ID_HEADER):
            response[REQUEST_ID_HEADER] = rid
        return response
