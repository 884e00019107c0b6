from __future__ import annotations

from typing import Iterator

from fastapi import Path, Request
from sqlalchemy.orm import Session

from nl_backend.db import get_session
from nl_backend.errors import RateLimitExceeded
from nl_backend.languages import LanguageContext, resolve_language
from nl_backend.rate_limiting import client_identity, get_rate_limiter


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency that yields a DB session.
    """
    with get_session() as session:
        yield session


def enforce_rate_limit(request: Request) -> None:
    """
    Dependency that counts the request against the client's window.

    Raises RateLimitExceeded (HTTP 429) once the window is full.
    """
    admission = get_rate_limiter().admit(client_identity(request))
    if not admission.allowed:
        raise RateLimitExceeded(reset_at=admission.reset_at or 0)


def get_language(lang: str = Path(...)) -> LanguageContext:
    """
    Dependency resolving the `{lang}` path segment to its column pair.
    """
    return resolve_language(lang)


__all__ = ["enforce_rate_limit", "get_db", "get_language"]
