from __future__ import annotations

import json
from pathlib import Path

import pytest

from nl_backend import rate_limiting


@pytest.fixture(autouse=True)
def _isolate_process_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Make tests deterministic even when run in a deployment-like shell.

    Exported NEPAL_LOCATIONS_* variables (rate limit tuning, proxy header,
    counter storage) change API behavior; clear them unless a test sets them.
    """
    for name in (
        "NEPAL_LOCATIONS_RATE_LIMITING_ENABLED",
        "NEPAL_LOCATIONS_RATE_LIMIT_REQUESTS",
        "NEPAL_LOCATIONS_RATE_LIMIT_WINDOW_SECONDS",
        "NEPAL_LOCATIONS_RATE_LIMIT_STORAGE_URI",
        "NEPAL_LOCATIONS_TRUSTED_PROXY_HEADER",
        "NEPAL_LOCATIONS_DATA_DIR",
    ):
        monkeypatch.delenv(name, raising=False)

    # Counters must not leak between tests; the limiter is rebuilt lazily
    # from the (per-test) environment on first use.
    rate_limiting._limiter = None


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


@pytest.fixture
def seed_data_dir(tmp_path: Path) -> Path:
    """
    Minimal seed tree in the loader's input layout.
    """
    root = tmp_path / "seed"
    _write_json(
        root / "province.json",
        [
            {"value": 1, "label_en": "Koshi", "label_np": "कोशी"},
            {"value": 3, "label_en": "Bagmati", "label_np": "बागमती"},
        ],
    )
    _write_json(
        root / "district" / "3.json",
        [
            {"id": 27, "name_en": "Kathmandu", "name": "काठमाडौं"},
            {"id": 28, "name_en": "Lalitpur", "name": "ललितपुर"},
        ],
    )
    _write_json(
        root / "district" / "1.json",
        [{"id": 1, "name_en": "Taplejung", "name": "ताप्लेजुङ"}],
    )
    _write_json(
        root / "municipality" / "27.json",
        [
            {
                "id": 271,
                "name_en": "Kathmandu Metropolitan City",
                "name": "काठमाडौं महानगरपालिका",
                "type_en": "Metropolitan City",
                "type": "महानगरपालिका",
            }
        ],
    )
    _write_json(root / "ward" / "271.json", [{"name": str(n)} for n in range(1, 33)])
    _write_json(root / "ward" / "notes.json", [{"name": "ignored"}])
    return root
