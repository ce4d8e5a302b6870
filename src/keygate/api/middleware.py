"""HTTP middleware: request logging and API key login."""

from __future__ import annotations

import re
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from keygate.auth.adjudicator import Adjudicator
from keygate.auth.credentials import PresentedApiKey
from keygate.auth.outcome import (
    MISSING_CREDENTIAL_DETAIL,
    Authenticated,
    Rejected,
    RejectionReason,
)

logger = structlog.get_logger()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with method, path, status code, and latency.

    Binds a request id to the structlog context for the duration of the
    request, so authentication events logged further down the stack can be
    correlated with the request line. An incoming ``X-Request-ID`` is
    reused when it is 1-128 characters of ``[A-Za-z0-9._-]``; otherwise
    one is generated. The id is echoed on the response.
    """

    REQUEST_ID_HEADER = "X-Request-ID"
    REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,128}")
    SKIP_PATHS: frozenset[str] = frozenset(
        {"/health", "/docs", "/openapi.json", "/redoc"}
    )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request and log timing information."""
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        request_id = self._request_id(request)
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            start = time.perf_counter()
            response = await call_next(request)
            latency_ms = int((time.perf_counter() - start) * 1000)

            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                latency_ms=latency_ms,
            )
        response.headers[self.REQUEST_ID_HEADER] = request_id
        return response

    def _request_id(self, request: Request) -> str:
        incoming = request.headers.get(self.REQUEST_ID_HEADER, "")
        if self.REQUEST_ID_PATTERN.fullmatch(incoming):
            return incoming
        return uuid.uuid4().hex


class ApiKeyAuthenticationMiddleware(BaseHTTPMiddleware):
    """Exchange the API key header for a principal on the login route.

    Only ``login_method login_path`` is handled; every other request
    passes through untouched, whatever headers it carries.

    On success the principal is stored on ``request.state.principal`` for
    this request only; no session is created. Every failure ends the
    request with 401 and never reaches the route handler.

    The adjudicator is taken from the constructor, or from
    ``app.state.adjudicator`` at request time.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        adjudicator: Adjudicator | None = None,
        header_name: str = "X-API-Key",
        login_method: str = "POST",
        login_path: str = "/api/auth-by-api-key",
    ) -> None:
        super().__init__(app)
        self._adjudicator = adjudicator
        self._header_name = header_name
        self._login_method = login_method.upper()
        self._login_path = login_path

    def is_login_request(self, request: Request) -> bool:
        return (
            request.method == self._login_method
            and request.url.path == self._login_path
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_login_request(request):
            return await call_next(request)

        request.state.principal = None

        api_key = request.headers.get(self._header_name)
        if api_key is None or not api_key.strip():
            logger.info(
                "api_key_rejected",
                reason=str(RejectionReason.MISSING_CREDENTIAL),
                path=request.url.path,
            )
            return self._unauthorized(MISSING_CREDENTIAL_DETAIL)

        adjudicator = self._adjudicator or request.app.state.adjudicator
        outcome = await adjudicator.authenticate(PresentedApiKey.from_header(api_key))

        if isinstance(outcome, Authenticated):
            principal = outcome.principal
            request.state.principal = principal
            logger.info(
                "api_key_authenticated",
                user_id=principal.user.id,
                key_id=principal.api_key.id,
            )
            return await call_next(request)

        if not isinstance(outcome, Rejected):
            # No adjudicator applied to the credential.
            outcome = Rejected(RejectionReason.INVALID_CREDENTIAL)

        if outcome.reason is RejectionReason.STORE_UNAVAILABLE:
            logger.error(
                "api_key_rejected", reason=str(outcome.reason), path=request.url.path
            )
        else:
            logger.info(
                "api_key_rejected", reason=str(outcome.reason), path=request.url.path
            )
        return self._unauthorized(outcome.detail)

    def _unauthorized(self, detail: str) -> Response:
        return PlainTextResponse(
            detail,
            status_code=401,
            headers={"WWW-Authenticate": f'ApiKey header="{self._header_name}"'},
        )
