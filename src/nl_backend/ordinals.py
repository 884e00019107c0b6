from __future__ import annotations

import re
from typing import Iterable, List

DELIMITER = ","

_WARD_NUMBER_RE = re.compile(r"[0-9]+")


def encode_ordinals(values: Iterable[object]) -> str:
    """
    Join ward labels into the single delimited string stored per municipality.
    """
    return DELIMITER.join(str(value).strip() for value in values)


def decode_ordinals(encoded: str | None) -> List[int]:
    """
    Split a stored ward list back into integers.

    Tokens are trimmed. Anything that is not a run of ASCII digits (empty
    tokens, signs and other digit scripts included) is dropped; the
    remaining order is kept.
    """
    if not encoded:
        return []
    values: List[int] = []
    for token in encoded.split(DELIMITER):
        token = token.strip()
        if _WARD_NUMBER_RE.fullmatch(token):
            values.append(int(token))
    return values


__all__ = ["decode_ordinals", "encode_ordinals"]
