"""Expiration date normalization for OCR'd packaging text."""

from __future__ import annotations

import calendar
import re
from datetime import date
from enum import Enum

# Spanish abbreviations and full names, plus the English abbreviations that
# differ from their Spanish counterparts.
MONTHS: dict[str, int] = {
    "ENE": 1, "ENERO": 1, "JAN": 1,
    "FEB": 2, "FEBRERO": 2,
    "MAR": 3, "MARZO": 3,
    "ABR": 4, "ABRIL": 4, "APR": 4,
    "MAY": 5, "MAYO": 5,
    "JUN": 6, "JUNIO": 6,
    "JUL": 7, "JULIO": 7,
    "AGO": 8, "AGOSTO": 8, "AUG": 8,
    "SEP": 9, "SEPTIEMBRE": 9, "SET": 9,
    "OCT": 10, "OCTUBRE": 10,
    "NOV": 11, "NOVIEMBRE": 11,
    "DIC": 12, "DICIEMBRE": 12, "DEC": 12,
}


class DateFormat(Enum):
    """Shape of a date string, decided by which pattern matched it."""

    MONTH_NAME = "month_name"
    DAY_MONTH_YEAR = "day_month_year"
    MONTH_YEAR = "month_year"
    ISO = "iso"
    YEAR_MONTH = "year_month"
    SHORT_MONTH_YEAR = "short_month_year"


_MONTH_NAME_RE = re.compile(r"([A-Z]{3,})\.?[\s-]*(\d{2,4})")

_SEP = r"[/.\-]"

# Order matters: the first pattern that matches decides the format.
_NUMERIC_FORMATS: list[tuple[DateFormat, re.Pattern[str]]] = [
    (DateFormat.DAY_MONTH_YEAR, re.compile(rf"(\d{{1,2}}){_SEP}(\d{{1,2}}){_SEP}(\d{{4}})")),
    (DateFormat.MONTH_YEAR, re.compile(rf"(\d{{1,2}}){_SEP}(\d{{4}})")),
    (DateFormat.ISO, re.compile(rf"(\d{{4}}){_SEP}(\d{{1,2}}){_SEP}(\d{{1,2}})")),
    (DateFormat.YEAR_MONTH, re.compile(rf"(\d{{4}}){_SEP}(\d{{1,2}})")),
    (DateFormat.SHORT_MONTH_YEAR, re.compile(r"(\d{1,2})[/.\-\s](\d{2})\b")),
]


def month_end(year: int, month: int) -> date:
    """Return the last calendar day of the given month."""
    return date(year, month, calendar.monthrange(year, month)[1])


def expand_year(digits: str) -> int:
    """Two-digit years are always read as 20YY."""
    year = int(digits)
    return 2000 + year if len(digits) == 2 else year


def _build_date(kind: DateFormat, groups: tuple[str, ...]) -> date:
    match kind:
        case DateFormat.DAY_MONTH_YEAR:
            day, month, year = groups
            return date(int(year), int(month), int(day))
        case DateFormat.MONTH_YEAR:
            month, year = groups
            return month_end(int(year), int(month))
        case DateFormat.ISO:
            year, month, day = groups
            return date(int(year), int(month), int(day))
        case DateFormat.YEAR_MONTH:
            year, month = groups
            return month_end(int(year), int(month))
        case DateFormat.SHORT_MONTH_YEAR:
            month, year = groups
            return month_end(expand_year(year), int(month))
    raise ValueError(f"unsupported date format: {kind}")


def _from_month_name(text: str) -> date | None:
    match = _MONTH_NAME_RE.search(text)
    if match is None:
        return None
    month = MONTHS.get(match.group(1))
    if month is None:
        return None
    try:
        return month_end(expand_year(match.group(2)), month)
    except ValueError:
        return None


def detect_format(text: str) -> tuple[DateFormat, tuple[str, ...]] | None:
    """Return the first numeric format that structurally matches ``text``."""
    for kind, pattern in _NUMERIC_FORMATS:
        match = pattern.search(text)
        if match:
            return kind, match.groups()
    return None


def normalize_date(text: str) -> date | None:
    """Parse a raw date fragment into a calendar date.

    Month names (``ABR2026``, ``NOV. 24``) and partial numeric dates
    (``04/2026``, ``12/27``) resolve to the last day of their month, so a
    product labelled ``04/2026`` stays usable through April 30th.

    Returns ``None`` when nothing parseable is found or when the matched
    numbers do not form a real date (``13/27``, ``31/02/2025``).
    """
    if not text:
        return None

    parsed = _from_month_name(text.upper().strip())
    if parsed is not None:
        return parsed

    detected = detect_format(text)
    if detected is None:
        return None
    kind, groups = detected
    try:
        return _build_date(kind, groups)
    except ValueError:
        return None
