"""Per-request correlation IDs, carried in a context variable for logging."""

from __future__ import annotations

import re
import uuid
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-Id"

# Client-supplied IDs are echoed into logs and headers, so only short
# token-like values are accepted.
_ACCEPTABLE_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._:-]{1,128}")

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def resolve_request_id(incoming: str | None) -> str:
    """
    Reuse the caller's request ID when it looks sane, otherwise mint one.
    """
    if incoming and _ACCEPTABLE_REQUEST_ID_RE.fullmatch(incoming):
        return incoming
    return generate_request_id()


def get_request_id() -> str | None:
    return _request_id_var.get()


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


__all__ = [
    "REQUEST_ID_HEADER",
    "generate_request_id",
    "get_request_id",
    "resolve_request_id",
    "set_request_id",
]
