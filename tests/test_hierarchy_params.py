from __future__ import annotations

import pytest
from sqlalchemy.dialects import sqlite

from nl_backend.errors import InvalidParameter, SearchTermTooLong
from nl_backend.hierarchy import (
    DISTRICTS,
    MAX_DB_INT,
    PROVINCES,
    Page,
    build_level_query,
    parse_municipality_id,
    parse_parent_id,
    parse_skip,
    resolve_page,
    validate_search_term,
)
from nl_backend.languages import resolve_language


# --- strict filters -----------------------------------------------------------


def test_parent_id_absent_means_no_filter() -> None:
    assert parse_parent_id(None, "province_id") is None


def test_parent_id_digits() -> None:
    assert parse_parent_id("3", "province_id") == 3
    assert parse_parent_id("007", "province_id") == 7


@pytest.mark.parametrize("raw", ["", "abc", "-1", "1.5", " 3", "3 ", "3\n", "1e3", "٣"])
def test_parent_id_rejects_non_digits(raw: str) -> None:
    with pytest.raises(InvalidParameter) as excinfo:
        parse_parent_id(raw, "district_id")
    assert excinfo.value.message == "district_id must be an integer"


def test_search_term_limits() -> None:
    assert validate_search_term(None) is None
    assert validate_search_term("") is None
    assert validate_search_term("a" * 30) == "a" * 30
    with pytest.raises(SearchTermTooLong):
        validate_search_term("a" * 31)


def test_search_term_length_counts_characters_not_bytes() -> None:
    term = "का" * 15  # 30 characters, 90 UTF-8 bytes
    assert validate_search_term(term) == term


@pytest.mark.parametrize("raw", ["1", "5", "10", "775"])
def test_municipality_id_accepts_positive_without_leading_zero(raw: str) -> None:
    assert parse_municipality_id(raw) == int(raw)


@pytest.mark.parametrize("raw", ["0", "05", "-5", "abc", "", "5a", "1.0"])
def test_municipality_id_rejects_malformed(raw: str) -> None:
    with pytest.raises(InvalidParameter) as excinfo:
        parse_municipality_id(raw)
    assert excinfo.value.message == "Invalid municipality id"


# --- permissive paging ----------------------------------------------------------


def test_page_defaults_without_search() -> None:
    assert resolve_page(None, None, searching=False) == Page(limit=20, offset=0)


def test_page_defaults_with_search() -> None:
    assert resolve_page(None, None, searching=True) == Page(limit=10, offset=0)


def test_page_clamps_limit() -> None:
    assert resolve_page("9999", None, searching=False).limit == 50
    assert resolve_page("9999", None, searching=True).limit == 20
    assert resolve_page("35", None, searching=False).limit == 35
    assert resolve_page("15", None, searching=True).limit == 15


@pytest.mark.parametrize("raw", ["0", "-4", "abc", ""])
def test_page_bad_limit_falls_back_to_default(raw: str) -> None:
    assert resolve_page(raw, None, searching=False).limit == 20
    assert resolve_page(raw, None, searching=True).limit == 10


@pytest.mark.parametrize("raw", ["-1", "abc", ""])
def test_page_bad_offset_falls_back_to_zero(raw: str) -> None:
    assert resolve_page(None, raw, searching=False).offset == 0


def test_page_offset_passthrough() -> None:
    assert resolve_page("5", "40", searching=False) == Page(limit=5, offset=40)


@pytest.mark.parametrize(
    "raw, expected",
    [("12abc", 12), ("5.5", 5), (" 7", 7), ("1_0", 1), ("+5", 20), ("\u0663", 20)],
)
def test_page_limit_reads_leading_ascii_digits(raw: str, expected: int) -> None:
    assert resolve_page(raw, None, searching=False).limit == expected


def test_page_out_of_range_values_do_not_reach_storage() -> None:
    huge = "99999999999999999999"
    assert resolve_page(huge, huge, searching=False) == Page(limit=50, offset=0)
    assert resolve_page(None, str(MAX_DB_INT), searching=False).offset == MAX_DB_INT
    assert resolve_page(None, str(MAX_DB_INT + 1), searching=False).offset == 0


def test_skip_is_strict() -> None:
    assert parse_skip(None) == 0
    assert parse_skip("") == 0
    assert parse_skip("20") == 20
    assert parse_skip(" 3 ") == 3
    for bad in ("-1", "abc", "+5", "5.5", "\u0663"):
        with pytest.raises(InvalidParameter) as excinfo:
            parse_skip(bad)
        assert excinfo.value.message == "Invalid offset"


# --- query shape ------------------------------------------------------------------


def _compile(stmt):
    return stmt.compile(dialect=sqlite.dialect())


def test_query_uses_language_columns_and_binds_values() -> None:
    stmt = build_level_query(
        DISTRICTS,
        resolve_language("np"),
        parent_id=3,
        search="Kath%",
        page=Page(limit=5, offset=10),
    )
    compiled = _compile(stmt)
    sql = str(compiled)

    assert "districts.name_np AS name" in sql
    assert "lower(districts.name_np_search) LIKE" in sql
    assert "districts.province_id =" in sql
    assert "ORDER BY districts.id" in sql
    # User input never appears in the SQL text itself.
    assert "Kath" not in sql
    assert "kath\\%" in "".join(str(v) for v in compiled.params.values())
    assert 5 in compiled.params.values()
    assert 10 in compiled.params.values()


def test_province_query_has_no_filters_without_input() -> None:
    stmt = build_level_query(
        PROVINCES,
        resolve_language("en"),
        parent_id=None,
        search=None,
        page=Page(limit=20, offset=0),
    )
    sql = str(_compile(stmt))
    assert "provinces.name_en AS name" in sql
    assert "WHERE" not in sql
