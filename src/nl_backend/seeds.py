"""
Bulk loader for the reference tables.

Reads the per-region JSON tree and inserts rows through the ORM:

    <data_dir>/province.json                   [{"value", "label_en", "label_np"}]
    <data_dir>/district/<province_id>.json     [{"id", "name_en", "name"}]
    <data_dir>/municipality/<district_id>.json [{"id", "name_en", "name", "type_en", "type"}]
    <data_dir>/ward/<municipality_id>.json     [{"name"}]

The parent id of districts, municipalities and wards comes from the file
name. Search columns are filled from the display names here, so the two
stay in sync. Loads are idempotent: rows whose id already exists are left
alone.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .hierarchy import fold_search_text
from .models import District, Municipality, Province, WardGroup
from .ordinals import encode_ordinals

logger = logging.getLogger(__name__)


@dataclass
class SeedSummary:
    provinces: int = 0
    districts: int = 0
    municipalities: int = 0
    wards: int = 0


def _read_json(path: Path) -> List[dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list in {path}")
    return data


def _iter_parent_files(directory: Path) -> Iterator[Tuple[int, Path]]:
    """
    Yield (parent_id, path) for every <int>.json file, in parent id order.
    """
    if not directory.is_dir():
        return
    entries = []
    for path in directory.glob("*.json"):
        if not path.stem.isdigit():
            logger.warning("Skipping %s: file name is not a numeric id", path)
            continue
        entries.append((int(path.stem), path))
    yield from sorted(entries)


def _existing_ids(session: Session, model: Any) -> set[int]:
    session.flush()
    return set(session.scalars(select(model.id)))


def _names(name_en: Any, name_np: Any) -> dict[str, str]:
    name_en = str(name_en or "").strip()
    name_np = str(name_np or "").strip()
    return {
        "name_en": name_en,
        "name_np": name_np,
        "name_en_search": fold_search_text(name_en),
        "name_np_search": fold_search_text(name_np),
    }


def seed_provinces(session: Session, data_dir: Path) -> int:
    path = data_dir / "province.json"
    if not path.is_file():
        logger.warning("No province file at %s", path)
        return 0

    existing = _existing_ids(session, Province)
    created = 0
    for item in _read_json(path):
        province_id = int(item["value"])
        if province_id in existing:
            continue
        session.add(
            Province(id=province_id, **_names(item.get("label_en"), item.get("label_np")))
        )
        existing.add(province_id)
        created += 1
    return created


def seed_districts(session: Session, data_dir: Path) -> int:
    existing = _existing_ids(session, District)
    created = 0
    for province_id, path in _iter_parent_files(data_dir / "district"):
        for item in _read_json(path):
            district_id = int(item["id"])
            if district_id in existing:
                continue
            session.add(
                District(
                    id=district_id,
                    province_id=province_id,
                    **_names(item.get("name_en"), item.get("name")),
                )
            )
            existing.add(district_id)
            created += 1
    return created


def seed_municipalities(session: Session, data_dir: Path) -> int:
    existing = _existing_ids(session, Municipality)
    created = 0
    for district_id, path in _iter_parent_files(data_dir / "municipality"):
        for item in _read_json(path):
            municipality_id = int(item["id"])
            if municipality_id in existing:
                continue
            session.add(
                Municipality(
                    id=municipality_id,
                    district_id=district_id,
                    type_en=str(item.get("type_en") or "").strip(),
                    type_np=str(item.get("type") or "").strip(),
                    **_names(item.get("name_en"), item.get("name")),
                )
            )
            existing.add(municipality_id)
            created += 1
    return created


def seed_wards(session: Session, data_dir: Path, replace: bool = False) -> int:
    """
    Store one WardGroup row per municipality file.

    With replace=True the wards table is emptied first.
    """
    if replace:
        session.execute(delete(WardGroup))
        logger.info("Cleared existing wards")

    existing = _existing_ids(session, WardGroup)
    created = 0
    for municipality_id, path in _iter_parent_files(data_dir / "ward"):
        if municipality_id in existing:
            continue
        labels = [item.get("name") for item in _read_json(path)]
        session.add(
            WardGroup(
                id=municipality_id,
                municipality_id=municipality_id,
                encoded_wards=encode_ordinals(label for label in labels if label is not None),
            )
        )
        existing.add(municipality_id)
        created += 1
    return created


def seed_hierarchy(session: Session, data_dir: Path) -> SeedSummary:
    """
    Load provinces, districts and municipalities, parents first.
    """
    summary = SeedSummary()
    summary.provinces = seed_provinces(session, data_dir)
    session.flush()
    summary.districts = seed_districts(session, data_dir)
    session.flush()
    summary.municipalities = seed_municipalities(session, data_dir)
    logger.info(
        "Seeded %d provinces, %d districts, %d municipalities",
        summary.provinces,
        summary.districts,
        summary.municipalities,
    )
    return summary


__all__ = [
    "SeedSummary",
    "seed_districts",
    "seed_hierarchy",
    "seed_municipalities",
    "seed_provinces",
    "seed_wards",
]
