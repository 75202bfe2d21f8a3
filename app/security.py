"""API key authentication, request size limits, and request ID middleware."""

import logging
import secrets
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from meeting_insights.core.logging import generate_request_id, request_id_var

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every request and log request lifecycle."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = generate_request_id()
        request.state.request_id = rid
        token = request_id_var.set(rid)
        start = time.perf_counter()
        try:
            logger.info("%s %s", request.method, request.url.path)
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s -> %s (%.0f ms)",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
            )
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            request_id_var.reset(token)


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Require ``Authorization: Bearer <API_KEY>`` on the analysis endpoints.

    Only paths under ``/api/`` are guarded; ``/health`` and the docs stay open.
    CORS preflight requests carry no credentials and are passed through.
    """

    def __init__(self, app, api_key: str | None, guarded_prefix: str = "/api/") -> None:  # noqa: ANN001
        super().__init__(app)
        self._expected = api_key.encode() if api_key else None
        self._guarded_prefix = guarded_prefix

    def _is_guarded(self, request: Request) -> bool:
        return (
            self._expected is not None
            and request.method != "OPTIONS"
            and request.url.path.startswith(self._guarded_prefix)
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._is_guarded(request):
            return await call_next(request)

        scheme, _, token = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token:
            return _unauthorized("Missing or malformed Authorization header. Expected: Bearer <API_KEY>")
        if not secrets.compare_digest(token.strip().encode(), self._expected):
            logger.warning(f"Rejected {request.method} {request.url.path}: invalid API key")
            return _unauthorized("Invalid API key")

        return await call_next(request)


def _unauthorized(error: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": error, "details": None},
        headers={"WWW-Authenticate": "Bearer"},
    )


class MaxBodySizeMiddleware(BaseHTTPMiddleware):
    """Reject analyze requests whose Content-Length exceeds a configured limit."""

    def __init__(self, app, max_bytes: int, guarded_paths: frozenset[str] = frozenset({"/api/analyze"})) -> None:  # noqa: ANN001
        super().__init__(app)
        self.max_bytes = max_bytes
        self._guarded_paths = guarded_paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "POST" and request.url.path in self._guarded_paths:
            content_length = request.headers.get("content-length")
            if content_length is not None:
                try:
                    too_large = int(content_length) > self.max_bytes
                except ValueError:
                    too_large = False  # non-integer content-length; let downstream handle
                if too_large:
                    return JSONResponse(
                        status_code=413,
                        content={"error": f"Request body exceeds maximum allowed size ({self.max_bytes} bytes)", "details": None},
                    )

        return await call_next(request)
