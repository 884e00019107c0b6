"""
Per-client fixed-window rate limiting for the locations API.

Every client gets DEFAULT_RATE_LIMIT_REQUESTS requests per window (60 per
60 seconds unless configured otherwise). A window opens on the client's
first request and its counter expires in the storage backend once the
window ends, so abandoned entries clean themselves up.

Counters live in a `limits` storage backend (memory:// by default, redis://
or memcached:// when several workers must share counters). The check and
the increment are two separate storage calls with no lock around them:
concurrent requests from one client near the limit can both pass the check
and a few more requests than the limit may be admitted in that window.
Limiting is therefore approximate. The increment itself is atomic in every
supported backend, so no admitted request is lost from the count.

Clients are identified by the trusted proxy header (CF-Connecting-IP by
default), then the first X-Forwarded-For entry, then a single shared
"unknown" bucket.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter
from starlette.requests import Request

from .config import (
    get_rate_limit_requests,
    get_rate_limit_storage_uri,
    get_rate_limit_window_seconds,
    get_rate_limiting_enabled,
    get_trusted_proxy_header,
)

logger = logging.getLogger(__name__)

# Namespace segment of every counter key.
KEY_NAMESPACE = "rl"

# Bucket shared by every request that carries no usable address header.
UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class Admission:
    allowed: bool
    # Epoch seconds at which the client's current window ends. Only known
    # (and only needed) when the request is denied.
    reset_at: Optional[int] = None


class RateLimiter:
    """
    Fixed-window request counter keyed by client identity.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        storage_uri: str = "memory://",
        enabled: bool = True,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.enabled = enabled
        self.item = RateLimitItemPerSecond(limit, window_seconds)
        self.storage = storage_from_string(storage_uri)
        self.strategy = FixedWindowRateLimiter(self.storage)

    def admit(self, client_id: str) -> Admission:
        """
        Count one request for client_id, or deny it if the window is full.

        A denied request is not counted; the deny path only reads.
        """
        if not self.enabled:
            return Admission(allowed=True)

        if not self.strategy.test(self.item, KEY_NAMESPACE, client_id):
            stats = self.strategy.get_window_stats(self.item, KEY_NAMESPACE, client_id)
            reset_at = int(math.ceil(stats.reset_time))
            logger.debug("Rate limit exceeded for %s until %s", client_id, reset_at)
            return Admission(allowed=False, reset_at=reset_at)

        self.strategy.hit(self.item, KEY_NAMESPACE, client_id)
        return Admission(allowed=True)

    def reset(self) -> None:
        """
        Drop all counters (test and operator helper).
        """
        self.storage.reset()


def client_identity(request: Request, trusted_header: Optional[str] = None) -> str:
    """
    Derive the rate-limit bucket for a request from its address headers.
    """
    header_name = trusted_header or get_trusted_proxy_header()
    trusted = (request.headers.get(header_name) or "").strip()
    if trusted:
        return trusted

    forwarded = request.headers.get("X-Forwarded-For") or ""
    first_hop = forwarded.split(",", 1)[0].strip()
    if first_hop:
        return first_hop

    return UNKNOWN_CLIENT


_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """
    Lazily construct and cache the process-wide limiter from configuration.
    """
    global _limiter
    if _limiter is None:
        _limiter = RateLimiter(
            limit=get_rate_limit_requests(),
            window_seconds=get_rate_limit_window_seconds(),
            storage_uri=get_rate_limit_storage_uri(),
            enabled=get_rate_limiting_enabled(),
        )
    return _limiter


__all__ = [
    "Admission",
    "KEY_NAMESPACE",
    "RateLimiter",
    "UNKNOWN_CLIENT",
    "client_identity",
    "get_rate_limiter",
]
