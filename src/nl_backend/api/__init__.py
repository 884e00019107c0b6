from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from nl_backend.config import get_cors_origins
from nl_backend.errors import INTERNAL_ERROR_MESSAGE, LocationApiError, RateLimitExceeded
from nl_backend.logging_config import configure_logging
from nl_backend.request_context import (
    REQUEST_ID_HEADER,
    generate_request_id,
    get_request_id,
    resolve_request_id,
    set_request_id,
)

from .routes_public import router as public_router

configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Nepal Locations API",
    version="0.1.0",
)


def _apply_response_headers(response: Response, request_id: str) -> Response:
    """
    Stamp the request ID and the security headers onto a response.

    Used by the middleware and by the last-resort error handler, whose
    responses are built outside the middleware stack.
    """
    headers = response.headers
    headers.setdefault("X-Content-Type-Options", "nosniff")
    headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    headers.setdefault("X-Frame-Options", "DENY")
    headers[REQUEST_ID_HEADER] = request_id
    return response


@app.middleware("http")
async def response_headers_middleware(request: Request, call_next):
    """
    Honour a well-formed client X-Request-Id or mint one, keep it in the
    request context for logging, and echo it back with the security headers.
    """
    request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
    set_request_id(request_id)
    response = await call_next(request)
    return _apply_response_headers(response, request_id)


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["GET", "HEAD", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(LocationApiError)
async def location_api_error_handler(request: Request, exc: LocationApiError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceeded):
        retry_after = max(0, exc.reset_at - int(time.time()))
        headers = {"Retry-After": str(retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(),
        headers=headers,
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception) -> Response:
    """
    Last-resort handler: log the failure, return nothing about it.
    """
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    response = JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})
    return _apply_response_headers(response, get_request_id() or generate_request_id())


app.include_router(public_router)

__all__ = ["app"]
