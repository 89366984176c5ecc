from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from cc_core.common.api.exceptions import ensure_request_id


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (from X-Request-Id when the caller sends one)
    and echoes it back on the response so error envelopes and log lines
    can be correlated with client reports.
    """

    HEADER_META_KEY = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-Id"

    def process_request(self, request):
        incoming = (request.META.get(self.HEADER_META_KEY) or "").strip()
        if incoming:
            request.request_id = incoming[:64]
        ensure_request_id(request)
        return None

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid and not response.has_header(self.RESPONSE_HEADER):
            response[self.RESPONSE_HEADER] = rid
        return response
