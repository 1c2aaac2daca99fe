"""Request logging middleware."""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger(__name__)

QUIET_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


def client_ip(request: Request) -> str | None:
    """Caller address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its outcome and duration.

    Processor callbacks are logged with the caller address so forged
    notifications can be traced.
    """

    def __init__(self, app, slow_request_seconds: float = 1.0, callback_prefix: str = "/webhooks/"):
        super().__init__(app)
        self.slow_request_seconds = slow_request_seconds
        self.callback_prefix = callback_prefix

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"

        path = request.url.path
        if path in QUIET_PATHS:
            return response

        if self.callback_prefix in path:
            logger.info(
                f"Callback {request.method} {path} from {client_ip(request) or 'unknown'} "
                f"-> {response.status_code} [{request_id}]"
            )
        elif elapsed > self.slow_request_seconds:
            # Processor round trips dominate slow requests
            logger.warning(f"Slow request {request.method} {path} took {elapsed:.3f}s [{request_id}]")
        else:
            logger.debug(f"{request.method} {path} -> {response.status_code} in {elapsed:.3f}s")

        return response
