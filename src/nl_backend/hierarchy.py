"""
Query construction for the province / district / municipality / ward lists.

Validation comes in two flavours:

- filters are strict: a malformed parent id or an over-long search term
  raises before any query runs;
- paging is permissive: bad or out-of-range limit/offset values quietly
  fall back to defaults or are clamped.

All request values reach SQL as bound parameters. Column choice for the
active language comes from LanguageContext, which only ever names ORM
attributes from a fixed mapping.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from .errors import InvalidParameter, SearchTermTooLong
from .languages import LanguageContext
from .models import District, Municipality, Province, WardGroup
from .ordinals import decode_ordinals

MAX_SEARCH_LENGTH = 30

DEFAULT_LIMIT = 20
MAX_LIMIT = 50
SEARCH_DEFAULT_LIMIT = 10
SEARCH_MAX_LIMIT = 20

WARD_PAGE_SIZE = 10

# Largest value a 64-bit signed INTEGER column (and bound parameter) can hold.
MAX_DB_INT = 2**63 - 1

_DIGITS_RE = re.compile(r"[0-9]+")
_LEADING_DIGITS_RE = re.compile(r"\s*([0-9]+)")
_MUNICIPALITY_ID_RE = re.compile(r"[1-9][0-9]*")


@dataclass(frozen=True)
class Level:
    name: str
    model: Type[Any]
    # Column holding the parent id, None for the top level.
    parent_column: Optional[str] = None


PROVINCES = Level(name="provinces", model=Province)
DISTRICTS = Level(name="districts", model=District, parent_column="province_id")
MUNICIPALITIES = Level(
    name="municipalities", model=Municipality, parent_column="district_id"
)


@dataclass(frozen=True)
class Page:
    limit: int
    offset: int


@dataclass
class HierarchyPage:
    # Rows in this page, not a total across all matches.
    count: int
    rows: List[Dict[str, Any]] = field(default_factory=list)


def fold_search_text(value: str) -> str:
    """
    Normalise text for substring matching; the loader uses the same folding
    when it fills the *_search columns.
    """
    return value.casefold()


def escape_like(value: str) -> str:
    """
    Escape LIKE wildcards so user input is treated as a literal substring.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_parent_id(raw: Optional[str], name: str) -> Optional[int]:
    """
    Parse an optional parent-id filter; it must be all decimal digits.
    """
    if raw is None:
        return None
    if not _DIGITS_RE.fullmatch(raw):
        raise InvalidParameter(f"{name} must be an integer")
    return int(raw)


def parse_municipality_id(raw: str) -> int:
    if not _MUNICIPALITY_ID_RE.fullmatch(raw):
        raise InvalidParameter("Invalid municipality id")
    return int(raw)


def validate_search_term(raw: Optional[str]) -> Optional[str]:
    """
    Return the search term, or None when no search was requested.
    """
    if not raw:
        return None
    if len(raw) > MAX_SEARCH_LENGTH:
        raise SearchTermTooLong()
    return raw


def _parse_leading_int(raw: Optional[str]) -> Optional[int]:
    """
    Read the ASCII digits at the start of raw, ignoring whatever follows
    ("12abc" and "5.5" give 12 and 5). Signs and other digit scripts
    count as no number at all.
    """
    if raw is None:
        return None
    match = _LEADING_DIGITS_RE.match(raw)
    if match is None:
        return None
    return int(match.group(1))


def _beyond_storage_range(value: Optional[int]) -> bool:
    return value is not None and value > MAX_DB_INT


def resolve_page(
    limit_raw: Optional[str],
    offset_raw: Optional[str],
    searching: bool,
) -> Page:
    """
    Turn raw limit/offset query values into a usable page.

    Searches get a smaller default and cap than plain listings.
    """
    if searching:
        default_limit, max_limit = SEARCH_DEFAULT_LIMIT, SEARCH_MAX_LIMIT
    else:
        default_limit, max_limit = DEFAULT_LIMIT, MAX_LIMIT

    limit = _parse_leading_int(limit_raw)
    if limit is None or limit < 1:
        limit = default_limit
    limit = min(limit, max_limit)

    offset = _parse_leading_int(offset_raw)
    if offset is None or _beyond_storage_range(offset):
        offset = 0

    return Page(limit=limit, offset=offset)


def parse_skip(raw: Optional[str]) -> int:
    """
    Parse the ward listing's skip value; unlike offset it is strict.
    """
    if not raw:
        return 0
    value = raw.strip()
    if not _DIGITS_RE.fullmatch(value):
        raise InvalidParameter("Invalid offset")
    return int(value)


def build_level_query(
    level: Level,
    lang: LanguageContext,
    parent_id: Optional[int],
    search: Optional[str],
    page: Page,
) -> Select:
    model = level.model
    display = getattr(model, lang.display_column)
    stmt = select(model.id, display.label("name"))

    if parent_id is not None and level.parent_column is not None:
        stmt = stmt.where(getattr(model, level.parent_column) == parent_id)

    if search:
        search_column = getattr(model, lang.search_column)
        pattern = f"%{escape_like(fold_search_text(search))}%"
        stmt = stmt.where(func.lower(search_column).like(pattern, escape="\\"))

    return stmt.order_by(model.id).limit(page.limit).offset(page.offset)


def list_level(
    session: Session,
    level: Level,
    lang: LanguageContext,
    parent_id: Optional[int],
    search: Optional[str],
    page: Page,
) -> HierarchyPage:
    # No stored id can exceed the column range, so nothing would match.
    if _beyond_storage_range(parent_id):
        return HierarchyPage(count=0)
    stmt = build_level_query(level, lang, parent_id, search, page)
    rows = [{"id": row.id, "name": row.name} for row in session.execute(stmt)]
    return HierarchyPage(count=len(rows), rows=rows)


def list_ward_groups(
    session: Session,
    municipality_id: Optional[int],
    skip: int,
) -> HierarchyPage:
    """
    Page through ward rows with their ward lists still encoded.
    """
    if _beyond_storage_range(municipality_id) or _beyond_storage_range(skip):
        return HierarchyPage(count=0)
    stmt = select(WardGroup.id, WardGroup.encoded_wards)
    if municipality_id is not None:
        stmt = stmt.where(WardGroup.municipality_id == municipality_id)
    stmt = stmt.order_by(WardGroup.id).limit(WARD_PAGE_SIZE).offset(skip)

    rows = [{"id": row.id, "name": row.encoded_wards} for row in session.execute(stmt)]
    return HierarchyPage(count=len(rows), rows=rows)


def get_municipality_wards(session: Session, municipality_id: int) -> List[Dict[str, Any]]:
    """
    Return the decoded ward numbers stored for one municipality.
    """
    if _beyond_storage_range(municipality_id):
        return []
    stmt = (
        select(WardGroup.id, WardGroup.encoded_wards)
        .where(WardGroup.municipality_id == municipality_id)
        .order_by(WardGroup.id)
    )
    return [
        {"id": row.id, "name": decode_ordinals(row.encoded_wards)}
        for row in session.execute(stmt)
    ]


__all__ = [
    "DISTRICTS",
    "HierarchyPage",
    "Level",
    "MUNICIPALITIES",
    "MAX_DB_INT",
    "PROVINCES",
    "Page",
    "build_level_query",
    "fold_search_text",
    "get_municipality_wards",
    "list_level",
    "list_ward_groups",
    "parse_municipality_id",
    "parse_parent_id",
    "parse_skip",
    "resolve_page",
    "validate_search_term",
]
