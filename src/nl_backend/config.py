from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

# === Core paths ===

# Path to this repo root (computed from this file)
REPO_ROOT = Path(__file__).resolve().parents[2]  # src/nl_backend -> src -> repo root

# Directory holding the per-region seed JSON files consumed by the loader.
DEFAULT_DATA_DIR = REPO_ROOT / "data" / "seed"

# === Database configuration ===

# By default we keep things simple and use a SQLite database file in the
# repository root. This can be overridden via NEPAL_LOCATIONS_DATABASE_URL.
DEFAULT_DATABASE_URL = f"sqlite:///{REPO_ROOT / 'nepal_locations.db'}"

# === CORS / frontend integration ===

# The API is public and read-only, so any origin may call it by default.
# Override via NEPAL_LOCATIONS_CORS_ORIGINS (comma-separated).
DEFAULT_CORS_ORIGINS: List[str] = ["*"]

# === Rate limiting ===

# Fixed window: at most DEFAULT_RATE_LIMIT_REQUESTS per client per window.
DEFAULT_RATE_LIMITING_ENABLED = True
DEFAULT_RATE_LIMIT_REQUESTS = 60
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 60

# Counter storage, in `limits` storage URI syntax. The in-memory store is
# per-process; point this at redis:// or memcached:// when running several
# workers so they share one set of counters.
DEFAULT_RATE_LIMIT_STORAGE_URI = "memory://"

# Header set by the edge proxy with the real client address. It is consulted
# before X-Forwarded-For when identifying clients.
DEFAULT_TRUSTED_PROXY_HEADER = "CF-Connecting-IP"


@dataclass
class DatabaseConfig:
    """
    Database connection settings.

    A very small wrapper around a single DATABASE_URL string, kept as a
    stable place to grow later (pool settings, echo flags, etc.).
    """

    database_url: str = DEFAULT_DATABASE_URL


def get_database_config() -> DatabaseConfig:
    """
    Return the current database configuration, honouring environment overrides.
    """
    url = os.environ.get("NEPAL_LOCATIONS_DATABASE_URL", DEFAULT_DATABASE_URL)
    return DatabaseConfig(database_url=url)


def get_data_dir() -> Path:
    """
    Return the directory the loader reads seed JSON from.
    """
    raw = os.environ.get("NEPAL_LOCATIONS_DATA_DIR", "").strip()
    if not raw:
        return DEFAULT_DATA_DIR
    return Path(raw)


def get_cors_origins() -> List[str]:
    """
    Return the list of allowed CORS origins for the public API.

    Controlled via NEPAL_LOCATIONS_CORS_ORIGINS (comma-separated).
    """
    raw = os.environ.get("NEPAL_LOCATIONS_CORS_ORIGINS")
    if raw is not None:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return DEFAULT_CORS_ORIGINS


def get_rate_limiting_enabled() -> bool:
    """
    Return whether per-client rate limiting is enforced.

    Controlled via NEPAL_LOCATIONS_RATE_LIMITING_ENABLED (truthy/falsey).
    Defaults to enabled.
    """
    default = "1" if DEFAULT_RATE_LIMITING_ENABLED else "0"
    raw = os.environ.get("NEPAL_LOCATIONS_RATE_LIMITING_ENABLED", default).strip().lower()
    return raw not in ("0", "false", "no", "off")


def get_rate_limit_requests() -> int:
    """
    Return the number of requests a client may make per window.
    """
    raw = os.environ.get(
        "NEPAL_LOCATIONS_RATE_LIMIT_REQUESTS",
        str(DEFAULT_RATE_LIMIT_REQUESTS),
    ).strip()
    try:
        value = int(raw)
    except ValueError:
        value = DEFAULT_RATE_LIMIT_REQUESTS
    return max(1, value)


def get_rate_limit_window_seconds() -> int:
    """
    Return the fixed window length in seconds.
    """
    raw = os.environ.get(
        "NEPAL_LOCATIONS_RATE_LIMIT_WINDOW_SECONDS",
        str(DEFAULT_RATE_LIMIT_WINDOW_SECONDS),
    ).strip()
    try:
        value = int(raw)
    except ValueError:
        value = DEFAULT_RATE_LIMIT_WINDOW_SECONDS
    return max(1, min(value, 86_400))


def get_rate_limit_storage_uri() -> str:
    """
    Return the `limits` storage URI backing the rate-limit counters.
    """
    raw = os.environ.get(
        "NEPAL_LOCATIONS_RATE_LIMIT_STORAGE_URI",
        DEFAULT_RATE_LIMIT_STORAGE_URI,
    )
    return raw.strip() or DEFAULT_RATE_LIMIT_STORAGE_URI


def get_trusted_proxy_header() -> str:
    """
    Return the name of the proxy header carrying the real client address.
    """
    raw = os.environ.get(
        "NEPAL_LOCATIONS_TRUSTED_PROXY_HEADER",
        DEFAULT_TRUSTED_PROXY_HEADER,
    )
    return raw.strip() or DEFAULT_TRUSTED_PROXY_HEADER
