"""Request correlation and body-size guard middleware.

Every request gets an identifier: the gateway or browser may send one in
``X-Request-ID``, otherwise a UUIDv4 is generated. The id is stored on the
request, published through ``REQUEST_ID_CTX`` for code that has no request
object (logging filters, HTTP adapter clients), and echoed back on the
response.

Payment callbacks are flat form posts, so anything larger than
``API_MAX_BYTES`` under ``/api/`` is rejected before it reaches a view.
"""

import contextvars
import os
import uuid

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")
MAX_API_BYTES = int(os.getenv("API_MAX_BYTES", str(64 * 1024)))


class RequestIdMiddleware(MiddlewareMixin):
    """Assign ``request.request_id`` and return it as ``X-Request-ID``."""

    HEADER = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        rid = request.META.get(self.HEADER) or str(uuid.uuid4())
        request.request_id = rid
        request._request_id_token = REQUEST_ID_CTX.set(rid)

    def process_response(self, request, response):
        response[self.RESPONSE_HEADER] = getattr(request, "request_id", REQUEST_ID_CTX.get())
        token = getattr(request, "_request_id_token", None)
        if token is not None:
            REQUEST_ID_CTX.reset(token)
        return response


class ApiSizeLimitMiddleware(MiddlewareMixin):
    """Answer 413 for oversized API bodies, judged by ``Content-Length``."""

    def process_request(self, request):
        if not request.path.startswith("/api/"):
            return None
        clen = request.META.get("CONTENT_LENGTH")
        if clen and clen.isdigit() and int(clen) > MAX_API_BYTES:
            return JsonResponse({"detail": "PAYLOAD_TOO_LARGE"}, status=413)
        return None
