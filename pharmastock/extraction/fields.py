"""Product code and expiration date extraction from recognized text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

from .dates import normalize_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    product_code: str | None = None
    expiration_date_text: str | None = None  # candidate handed to the normalizer
    expiration_date: date | None = None


class CodeKind(Enum):
    PREFIXED = "prefixed"
    TOKEN = "token"
    BARCODE = "barcode"


class DateKind(Enum):
    MONTH_NAME = "month_name"
    LABELED_FULL = "labeled_full"
    LABELED_PARTIAL = "labeled_partial"
    NUMERIC_SEQUENCE = "numeric_sequence"
    FULL = "full"
    MONTH_YEAR = "month_year"
    ISO = "iso"


@dataclass(frozen=True)
class CodeRule:
    kind: CodeKind
    pattern: re.Pattern[str]


@dataclass(frozen=True)
class DateRule:
    kind: DateKind
    pattern: re.Pattern[str]
    candidate: Callable[[re.Match[str]], str]


def _first_group(match: re.Match[str]) -> str:
    return match.group(1)


def _month_and_year(match: re.Match[str]) -> str:
    return f"{match.group(1)} {match.group(2)}"


def _numeric_month_and_year(match: re.Match[str]) -> str:
    # "2123764 12 27" -> "12/27"
    return f"{match.group(1)}/{match.group(2)}"


# Longer labels first so "LOTE12345" is not read as "LOT" + "E12345".
_CODE_LABELS = r"(?:LOTE|LOT|CODE|COD|REF)"
_DATE_LABELS = r"(?:CADUCIDAD|CAD|VENCE|VTO|EXPIRY|EXPIRA|EXP|V)?"
_DATE_SEP = r"[/.\-]"

CODE_RULES: list[CodeRule] = [
    CodeRule(
        CodeKind.PREFIXED,
        re.compile(rf"{_CODE_LABELS}[\s:.\-]*([A-Z0-9\-]{{4,20}})", re.IGNORECASE),
    ),
    CodeRule(CodeKind.TOKEN, re.compile(r"\b([A-Z0-9]{6,20})\b", re.IGNORECASE)),
    CodeRule(CodeKind.BARCODE, re.compile(r"\b(\d{12,14})\b")),
]

DATE_RULES: list[DateRule] = [
    DateRule(
        DateKind.MONTH_NAME,
        re.compile(
            r"\b(ENE|FEB|MAR|ABR|MAY|JUN|JUL|AGO|SEP|OCT|NOV|DIC)[A-Z]*\.?\s*(\d{2,4})\b",
            re.IGNORECASE,
        ),
        _month_and_year,
    ),
    DateRule(
        DateKind.LABELED_FULL,
        re.compile(
            rf"{_DATE_LABELS}[\s:.\-]*(\d{{1,2}}{_DATE_SEP}\d{{1,2}}{_DATE_SEP}\d{{2,4}})",
            re.IGNORECASE,
        ),
        _first_group,
    ),
    DateRule(
        DateKind.LABELED_PARTIAL,
        re.compile(
            rf"{_DATE_LABELS}[\s:.\-]*(\d{{1,2}}{_DATE_SEP}\d{{2,4}})",
            re.IGNORECASE,
        ),
        _first_group,
    ),
    DateRule(
        DateKind.NUMERIC_SEQUENCE,
        re.compile(r"\b\d{4,}\s+(\d{1,2})\s+(\d{2})\b"),
        _numeric_month_and_year,
    ),
    DateRule(
        DateKind.FULL,
        re.compile(rf"\b(\d{{1,2}}{_DATE_SEP}\d{{1,2}}{_DATE_SEP}\d{{2,4}})\b"),
        _first_group,
    ),
    DateRule(
        DateKind.MONTH_YEAR,
        re.compile(rf"\b(\d{{1,2}}{_DATE_SEP}\d{{4}})\b"),
        _first_group,
    ),
    DateRule(
        DateKind.ISO,
        re.compile(rf"\b(\d{{4}}{_DATE_SEP}\d{{1,2}}{_DATE_SEP}\d{{1,2}})\b"),
        _first_group,
    ),
]


def find_product_code(text: str, rules: list[CodeRule] | None = None) -> str | None:
    """Return the first code found, scanning line by line.

    Within a line the rules are tried in priority order; the first line
    that yields a code ends the scan.
    """
    rules = CODE_RULES if rules is None else rules
    for line in (raw.strip() for raw in text.split("\n")):
        for rule in rules:
            match = rule.pattern.search(line)
            if match:
                logger.debug("Code rule %s matched %r", rule.kind.value, match.group(1))
                return match.group(1)
    return None


def find_expiration_date(
    text: str, rules: list[DateRule] | None = None
) -> tuple[str, date] | None:
    """Return ``(candidate, date)`` for the first rule whose match normalizes.

    Newlines are collapsed so a date split across lines still matches.
    A rule whose candidate is not a real date falls through to the next one.
    """
    rules = DATE_RULES if rules is None else rules
    flat = text.replace("\n", " ")
    for rule in rules:
        match = rule.pattern.search(flat)
        if match is None:
            continue
        candidate = rule.candidate(match)
        parsed = normalize_date(candidate)
        if parsed is not None:
            logger.debug("Date rule %s matched %r -> %s", rule.kind.value, candidate, parsed)
            return candidate, parsed
        logger.debug("Date rule %s matched %r but it is not a date", rule.kind.value, candidate)
    return None


def extract_fields(text: str) -> ExtractionResult:
    """Extract the product code and expiration date from one image's text."""
    code = find_product_code(text)
    found = find_expiration_date(text)
    if found is None:
        return ExtractionResult(product_code=code)
    candidate, parsed = found
    return ExtractionResult(
        product_code=code,
        expiration_date_text=candidate,
        expiration_date=parsed,
    )
