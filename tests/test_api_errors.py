"""Error mapping, request IDs and security headers."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from fastapi.testclient import TestClient

from nl_backend import db as db_module
from nl_backend.db import Base, get_engine


def _init_test_app(tmp_path: Path, monkeypatch, create_tables: bool = True, **kwargs):
    """
    Configure a temporary SQLite DB and return a FastAPI TestClient.

    With create_tables=False every query fails, which exercises the
    internal-error path.
    """
    db_path = tmp_path / "errors_test.db"
    monkeypatch.setenv("NEPAL_LOCATIONS_DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("NEPAL_LOCATIONS_RATE_LIMITING_ENABLED", "0")

    # Reset cached engine/session so we pick up the new URL.
    db_module._engine = None
    db_module._SessionLocal = None

    engine = get_engine()
    Base.metadata.drop_all(engine)
    if create_tables:
        Base.metadata.create_all(engine)

    from nl_backend.api import app

    return TestClient(app, **kwargs)


def test_invalid_language_is_rejected(tmp_path, monkeypatch) -> None:
    client = _init_test_app(tmp_path, monkeypatch)

    for lang in ("fr", "EN", "Np"):
        resp = client.get(f"/{lang}/provinces")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid language"}


def test_non_numeric_parent_filters_are_rejected(tmp_path, monkeypatch) -> None:
    client = _init_test_app(tmp_path, monkeypatch)

    resp = client.get("/en/districts", params={"of-p": "3a"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "province_id must be an integer"}

    resp = client.get("/en/municipalities", params={"of-d": "-2"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "district_id must be an integer"}


def test_long_search_rejected_before_storage(tmp_path, monkeypatch) -> None:
    # No tables: any query would fail with a 500.
    client = _init_test_app(
        tmp_path, monkeypatch, create_tables=False, raise_server_exceptions=False
    )

    for path in ("/en/provinces", "/en/districts", "/np/municipalities"):
        resp = client.get(path, params={"s": "a" * 31})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Search string too long (max 30 characters)"}


def test_bad_parent_filter_rejected_before_storage(tmp_path, monkeypatch) -> None:
    client = _init_test_app(
        tmp_path, monkeypatch, create_tables=False, raise_server_exceptions=False
    )
    assert client.get("/en/districts", params={"of-p": "x"}).status_code == 400


def test_storage_failure_is_generic_500(tmp_path, monkeypatch, caplog) -> None:
    client = _init_test_app(
        tmp_path, monkeypatch, create_tables=False, raise_server_exceptions=False
    )

    with caplog.at_level(logging.ERROR, logger="nl_backend.api"):
        resp = client.get("/en/provinces", headers={"X-Request-Id": "req-500"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "provinces" not in resp.text
    assert resp.headers["X-Request-Id"] == "req-500"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"

    records = [r for r in caplog.records if r.name == "nl_backend.api"]
    assert records, "internal errors should be logged"
    assert "/en/provinces" in records[0].getMessage()
    assert records[0].exc_info is not None


def test_failure_does_not_affect_later_requests(tmp_path, monkeypatch) -> None:
    client = _init_test_app(
        tmp_path, monkeypatch, create_tables=False, raise_server_exceptions=False
    )
    resp = client.get("/ward/5")
    assert resp.status_code == 500
    assert "X-Request-Id" in resp.headers

    Base.metadata.create_all(get_engine())
    resp = client.get("/ward/5")
    assert resp.status_code == 200
    assert resp.json() == []


def test_request_id_generated_and_passed_through(tmp_path, monkeypatch) -> None:
    client = _init_test_app(tmp_path, monkeypatch)

    resp = client.get("/")
    uuid_pattern = re.compile(
        r"^[a-f0-9]{8}-[a-f0-9]{4}-4[a-f0-9]{3}-[89ab][a-f0-9]{3}-[a-f0-9]{12}$"
    )
    assert uuid_pattern.match(resp.headers["X-Request-Id"])

    resp = client.get("/", headers={"X-Request-Id": "custom-id-123"})
    assert resp.headers["X-Request-Id"] == "custom-id-123"

    # Anything that is not a short token is replaced rather than echoed.
    resp = client.get("/", headers={"X-Request-Id": "bad id; drop table"})
    assert uuid_pattern.match(resp.headers["X-Request-Id"])


def test_security_headers_present(tmp_path, monkeypatch) -> None:
    client = _init_test_app(tmp_path, monkeypatch)

    resp = client.get("/en/provinces")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_error_responses_carry_headers_too(tmp_path, monkeypatch) -> None:
    client = _init_test_app(tmp_path, monkeypatch)

    resp = client.get("/xx/provinces")
    assert resp.status_code == 400
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-Id" in resp.headers


def test_cors_allows_any_origin_by_default(tmp_path, monkeypatch) -> None:
    client = _init_test_app(tmp_path, monkeypatch)

    resp = client.get("/", headers={"Origin": "https://example.org"})
    assert resp.headers.get("access-control-allow-origin") == "*"


def test_openapi_documents_error_shapes(tmp_path, monkeypatch) -> None:
    client = _init_test_app(tmp_path, monkeypatch)

    openapi = client.get("/openapi.json").json()
    schemas = openapi["components"]["schemas"]
    assert set(schemas["RateLimitErrorSchema"]["required"]) == {"error", "reset"}
    assert schemas["ErrorSchema"]["required"] == ["error"]

    provinces = openapi["paths"]["/{lang}/provinces"]["get"]["responses"]
    assert provinces["429"]["content"]["application/json"]["schema"]["$ref"].endswith(
        "/RateLimitErrorSchema"
    )
    assert "400" in provinces
    ward_lookup = openapi["paths"]["/ward/{municipality_id}"]["get"]["responses"]
    assert "400" in ward_lookup
    assert "429" not in ward_lookup
