"""Text extraction: product codes and expiration dates from OCR output."""

from .aggregate import AggregatedResult, aggregate
from .dates import DateFormat, normalize_date
from .fields import (
    CodeKind,
    DateKind,
    ExtractionResult,
    extract_fields,
    find_expiration_date,
    find_product_code,
)

__all__ = [
    "AggregatedResult",
    "aggregate",
    "DateFormat",
    "normalize_date",
    "CodeKind",
    "DateKind",
    "ExtractionResult",
    "extract_fields",
    "find_expiration_date",
    "find_product_code",
]
