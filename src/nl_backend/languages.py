from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .errors import InvalidLanguage


class Language(str, Enum):
    EN = "en"
    NP = "np"


@dataclass(frozen=True)
class LanguageContext:
    """
    Column selection for one request.

    Built once by resolve_language() and passed explicitly to the query
    layer. The column names are ORM attribute names from a fixed mapping,
    never derived from request input.
    """

    language: Language
    display_column: str
    search_column: str


_COLUMNS: Dict[Language, Tuple[str, str]] = {
    Language.EN: ("name_en", "name_en_search"),
    Language.NP: ("name_np", "name_np_search"),
}


def resolve_language(raw: str) -> LanguageContext:
    """
    Map a language path segment to its display/search column pair.

    Only the exact codes "en" and "np" are accepted.
    """
    try:
        language = Language(raw)
    except ValueError:
        raise InvalidLanguage() from None
    display_column, search_column = _COLUMNS[language]
    return LanguageContext(
        language=language,
        display_column=display_column,
        search_column=search_column,
    )


__all__ = ["Language", "LanguageContext", "resolve_language"]
