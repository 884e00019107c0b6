from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from nl_backend.hierarchy import (
    DISTRICTS,
    MUNICIPALITIES,
    PROVINCES,
    Level,
    get_municipality_wards,
    list_level,
    list_ward_groups,
    parse_municipality_id,
    parse_parent_id,
    parse_skip,
    resolve_page,
    validate_search_term,
)
from nl_backend.languages import LanguageContext

from .deps import enforce_rate_limit, get_db, get_language
from .schemas import (
    ErrorSchema,
    HealthSchema,
    LocationListSchema,
    MunicipalityWardsSchema,
    RateLimitErrorSchema,
    WardGroupListSchema,
)

router = APIRouter()

# Everything under /{lang} is rate limited, and the limiter runs before the
# language is validated.
lang_router = APIRouter(
    prefix="/{lang}",
    dependencies=[Depends(enforce_rate_limit)],
    responses={
        400: {"model": ErrorSchema},
        429: {"model": RateLimitErrorSchema},
    },
)


@router.get("/", response_model=HealthSchema)
def root() -> HealthSchema:
    """
    Liveness check.
    """
    return HealthSchema(message="Nepal Location API is running!")


@router.get(
    "/ward/{municipality_id}",
    response_model=List[MunicipalityWardsSchema],
    responses={400: {"model": ErrorSchema}},
)
def get_wards_for_municipality(
    municipality_id: str,
    db: Session = Depends(get_db),
) -> List[MunicipalityWardsSchema]:
    """
    Ward numbers of one municipality, decoded to integers.
    """
    parsed_id = parse_municipality_id(municipality_id)
    rows = get_municipality_wards(db, parsed_id)
    return [MunicipalityWardsSchema(**row) for row in rows]


def _list(
    level: Level,
    lang: LanguageContext,
    db: Session,
    parent_raw: Optional[str],
    parent_name: str,
    s: Optional[str],
    limit: Optional[str],
    offset: Optional[str],
) -> LocationListSchema:
    search = validate_search_term(s)
    parent_id = parse_parent_id(parent_raw, parent_name)
    page = resolve_page(limit, offset, searching=search is not None)
    result = list_level(db, level, lang, parent_id, search, page)
    return LocationListSchema(count=result.count, data=result.rows)


@lang_router.get("/provinces", response_model=LocationListSchema)
def list_provinces(
    lang: LanguageContext = Depends(get_language),
    s: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> LocationListSchema:
    return _list(PROVINCES, lang, db, None, "province_id", s, limit, offset)


@lang_router.get("/districts", response_model=LocationListSchema)
def list_districts(
    lang: LanguageContext = Depends(get_language),
    of_p: Optional[str] = Query(default=None, alias="of-p"),
    s: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> LocationListSchema:
    """
    Districts, optionally restricted to one province via `of-p`.
    """
    return _list(DISTRICTS, lang, db, of_p, "province_id", s, limit, offset)


@lang_router.get("/municipalities", response_model=LocationListSchema)
def list_municipalities(
    lang: LanguageContext = Depends(get_language),
    of_d: Optional[str] = Query(default=None, alias="of-d"),
    s: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> LocationListSchema:
    """
    Municipalities, optionally restricted to one district via `of-d`.
    """
    return _list(MUNICIPALITIES, lang, db, of_d, "district_id", s, limit, offset)


@lang_router.get("/wards", response_model=WardGroupListSchema)
def list_wards(
    lang: LanguageContext = Depends(get_language),
    of_m: Optional[str] = Query(default=None, alias="of-m"),
    skip: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> WardGroupListSchema:
    """
    Raw ward rows, ten per page. Ward lists stay in their stored
    comma-delimited form here; /ward/{id} returns them decoded.
    """
    municipality_id = parse_parent_id(of_m, "municipality_id")
    offset = parse_skip(skip)
    result = list_ward_groups(db, municipality_id, offset)
    return WardGroupListSchema(count=result.count, data=result.rows)


router.include_router(lang_router)

__all__ = ["router"]
