"""Merge extraction results from several photos of the same package."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable

from .fields import ExtractionResult, extract_fields

logger = logging.getLogger(__name__)

BLOCK_DELIMITER = "\n---\n"


@dataclass(frozen=True)
class AggregatedResult:
    product_code: str | None = None
    expiration_date: date | None = None
    combined_raw_text: str = ""

    @property
    def success(self) -> bool:
        return self.product_code is not None or self.expiration_date is not None


def aggregate(
    texts: Iterable[str | None],
    extractor: Callable[[str], ExtractionResult] = extract_fields,
) -> AggregatedResult:
    """Combine per-image text into a single result.

    Images are processed in capture order. The code and the date are picked
    independently: the first image that yields a code supplies the code, and
    the first image that yields a date supplies the date, even when those are
    different images.

    A ``None`` or empty block (failed detection) is skipped.
    """
    product_code: str | None = None
    expiration_date: date | None = None
    raw_parts: list[str] = []

    for index, text in enumerate(texts):
        if not isinstance(text, str) or not text:
            logger.warning("Image %d produced no text; skipping", index + 1)
            continue

        raw_parts.append(text + BLOCK_DELIMITER)
        result = extractor(text)

        if product_code is None and result.product_code:
            product_code = result.product_code
        if expiration_date is None and result.expiration_date is not None:
            expiration_date = result.expiration_date

    return AggregatedResult(
        product_code=product_code,
        expiration_date=expiration_date,
        combined_raw_text="".join(raw_parts),
    )
