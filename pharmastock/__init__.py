"""Pharmacy stock scanner: lot codes and expiration dates from package photos."""

from .camera import PackageCamera, PackageCapture
from .config import (
    AlertConfig,
    CameraConfig,
    OCRConfig,
    ScanConfig,
    ScannerConfig,
    load_config,
)
from .extraction import AggregatedResult, ExtractionResult, aggregate, extract_fields, normalize_date
from .ocr import TextDetector, create_detector
from .scanner import ExpirationScanner, ScanResult
from .status import ExpirationStatus, check_alert_months, classify, status_label

__all__ = [
    "PackageCamera",
    "PackageCapture",
    "TextDetector",
    "create_detector",
    "ExpirationScanner",
    "ScanResult",
    "AggregatedResult",
    "ExtractionResult",
    "aggregate",
    "extract_fields",
    "normalize_date",
    "ExpirationStatus",
    "check_alert_months",
    "classify",
    "status_label",
    "ScannerConfig",
    "CameraConfig",
    "OCRConfig",
    "AlertConfig",
    "ScanConfig",
    "load_config",
]
