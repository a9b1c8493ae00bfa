import time
import uuid

import structlog

logger = structlog.get_logger()


class RequestLogMiddleware:
    """Bind a request_id to every log line of an API request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith("/api"):
            return self.get_response(request)

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.monotonic()
        response = self.get_response(request)
        logger.info(
            "api_request",
            method=request.method,
            path=request.path,
            status=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        response["X-Request-ID"] = request_id
        structlog.contextvars.clear_contextvars()
        return response
