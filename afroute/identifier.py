"""Standardized institution identifier: ``CCC`` + ``TT`` + ``SSSSSS``.

The identifier is exactly 11 ASCII digits with no separators:

    CCC     3-digit country code (e.g. 234 for Nigeria)
    TT      2-digit category (commercial bank, mobile money, PSP, ...)
    SSSSSS  6-digit zero-padded sequence within the country and category

    23401000009
    └┬┘└┬┘└──┬─┘
     │  │    └── sequence 9
     │  └─────── category 01
     └────────── country 234

This module is the explicit structural validator. Registry lookups never call
it: a malformed code is simply a code that matches no institution.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Union

COUNTRY_CODE_LENGTH = 3
CATEGORY_LENGTH = 2
SEQUENCE_LENGTH = 6
STANDARD_CODE_LENGTH = COUNTRY_CODE_LENGTH + CATEGORY_LENGTH + SEQUENCE_LENGTH

# [0-9] rather than \d: str patterns match non-ASCII digits with \d.
_STANDARD_CODE_RE = re.compile(r"([0-9]{3})([0-9]{2})([0-9]{6})")
_DIGITS_RE = re.compile(r"[0-9]+")


class MalformedCodeError(ValueError):
    """Raised when a value does not follow the 11-digit identifier format."""


@dataclass(frozen=True)
class StandardCode:
    """A parsed standardized identifier. All parts keep their zero padding."""

    country_code: str
    category: str
    sequence: str

    def __str__(self) -> str:
        return f"{self.country_code}{self.category}{self.sequence}"

    @property
    def sequence_number(self) -> int:
        return int(self.sequence)

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": str(self),
            "country_code": self.country_code,
            "category": self.category,
            "sequence": self.sequence,
        }


def is_well_formed(code: Any) -> bool:
    """True when ``code`` is a string of exactly 11 ASCII digits."""
    return isinstance(code, str) and _STANDARD_CODE_RE.fullmatch(code) is not None


def parse_standard_code(code: Any) -> StandardCode:
    """Split an identifier into its country, category and sequence parts.

    Raises ``MalformedCodeError`` for anything that is not 11 ASCII digits.
    No trimming or other normalization is applied.
    """
    m = _STANDARD_CODE_RE.fullmatch(code) if isinstance(code, str) else None
    if m is None:
        raise MalformedCodeError(
            f"standardized code must be {STANDARD_CODE_LENGTH} ASCII digits (CCC+TT+SSSSSS): {code!r}"
        )
    return StandardCode(country_code=m.group(1), category=m.group(2), sequence=m.group(3))


def _pad_part(value: Union[int, str], width: int, label: str) -> str:
    if isinstance(value, bool):
        raise MalformedCodeError(f"{label} must be an integer or digit string, got bool")
    if isinstance(value, int):
        if value < 0:
            raise MalformedCodeError(f"{label} must not be negative: {value}")
        text = str(value)
    elif isinstance(value, str) and _DIGITS_RE.fullmatch(value):
        text = value
    else:
        raise MalformedCodeError(f"{label} must be an integer or digit string: {value!r}")

    if len(text) > width:
        # "0234" is still country 234; only significant digits count.
        stripped = text.lstrip("0") or "0"
        if len(stripped) > width:
            raise MalformedCodeError(f"{label} does not fit in {width} digits: {value!r}")
        text = stripped
    return text.zfill(width)


def format_standard_code(
    country_code: Union[int, str],
    category: Union[int, str],
    sequence: Union[int, str],
) -> str:
    """Compose an 11-digit identifier from its parts, zero-padding each one.

    >>> format_standard_code(234, 1, 9)
    '23401000009'
    """
    return (
        _pad_part(country_code, COUNTRY_CODE_LENGTH, "country code")
        + _pad_part(category, CATEGORY_LENGTH, "category")
        + _pad_part(sequence, SEQUENCE_LENGTH, "sequence")
    )
