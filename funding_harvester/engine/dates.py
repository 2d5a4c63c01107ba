"""Deadline parsing into ISO ``YYYY-MM-DD`` strings."""

from __future__ import annotations

import re
from datetime import date

PT_MONTHS = {
    "jan": 1,
    "fev": 2,
    "mar": 3,
    "abr": 4,
    "mai": 5,
    "jun": 6,
    "jul": 7,
    "ago": 8,
    "set": 9,
    "out": 10,
    "nov": 11,
    "dez": 12,
}

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ][0-9:.]+(?:Z|[+-]\d{2}:?\d{2})?)?$")
_DMY_RE = re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4})(?!\d)")
# Accepts "25 de dez. de 2025" and spelled-out months ("25 de dezembro de 2025").
_PT_LONG_RE = re.compile(
    r"(?<!\d)(\d{1,2})\s+de\s+([a-zç]{3,9})\.?\s+de\s+(\d{4})(?!\d)",
    re.IGNORECASE,
)


def _iso_date(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_iso(text: str) -> str | None:
    match = _ISO_RE.match(text)
    if not match:
        return None
    year, month, day = (int(group) for group in match.groups())
    if _iso_date(year, month, day) is None:
        return None
    return text[:10]


def parse_day_month_year(text: str) -> str | None:
    match = _DMY_RE.search(text)
    if not match:
        return None
    day, month, year = (int(group) for group in match.groups())
    return _iso_date(year, month, day)


def parse_portuguese_long(text: str) -> str | None:
    match = _PT_LONG_RE.search(text)
    if not match:
        return None
    month = PT_MONTHS.get(match.group(2).lower()[:3])
    if month is None:
        return None
    return _iso_date(int(match.group(3)), month, int(match.group(1)))


_PARSERS = (parse_iso, parse_day_month_year, parse_portuguese_long)


def parse_deadline(value: object) -> str | None:
    """Normalise deadline text; unknown formats give ``None``, never an error."""

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    for parser in _PARSERS:
        parsed = parser(text)
        if parsed is not None:
            return parsed
    return None


__all__ = [
    "PT_MONTHS",
    "parse_day_month_year",
    "parse_deadline",
    "parse_iso",
    "parse_portuguese_long",
]
