"""Scan service: package photos in, product code and expiration date out."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Sequence

from .extraction import aggregate
from .ocr import TextDetector
from .status import ExpirationStatus, check_alert_months, classify

logger = logging.getLogger(__name__)

NO_IMAGES_ERROR = "No se proporcionaron imágenes"
NOTHING_FOUND_ERROR = "No se detectó información relevante en las imágenes"

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


@dataclass(frozen=True)
class ScanResult:
    success: bool
    product_code: str | None = None
    expiration_date: date | None = None
    raw_text: str = ""
    error: str | None = None
    expiration_status: ExpirationStatus | None = None

    def to_dict(self) -> dict:
        """Serialize to the response shape expected by HTTP clients."""
        data: dict = {
            "success": self.success,
            "productCode": self.product_code,
            "expirationDate": (
                self.expiration_date.isoformat() if self.expiration_date else None
            ),
            "rawText": self.raw_text,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.expiration_status is not None:
            data["expirationStatus"] = self.expiration_status.value
        return data


ResultCallback = Callable[[ScanResult], None]


def decode_image(payload: bytes | str) -> bytes:
    """Return raw image bytes from bytes or a (data URL) base64 string.

    Raises:
        ValueError: If a string payload is not valid base64.
    """
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    encoded = _DATA_URL_PREFIX.sub("", payload.strip())
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 image payload: {e}") from e


class ExpirationScanner:
    """Run text detection over a batch of photos of one package.

    Each photo is detected independently; a photo whose detection fails
    is logged and skipped without aborting the batch.

    Args:
        detector: Text detection backend.
        alert_months: When set, found dates are classified against this
            alert window of 1 to 12 months.
        on_result: Called with every finished result (e.g. to persist the
            unit or announce its status).

    Raises:
        ValueError: If ``alert_months`` is outside 1 to 12.
    """

    def __init__(
        self,
        detector: TextDetector,
        alert_months: int | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        self._detector = detector
        if alert_months is not None:
            alert_months = check_alert_months(alert_months)
        self._alert_months = alert_months
        self._on_result = on_result

    async def _detect(self, index: int, payload: bytes | str) -> str | None:
        try:
            image = decode_image(payload)
            return await self._detector.detect_text(image)
        except Exception:
            logger.exception("Text detection failed for image %d", index + 1)
            return None

    async def scan(
        self, images: Sequence[bytes | str], today: date | None = None
    ) -> ScanResult:
        """Detect, extract and merge the product data of a batch of photos."""
        if not images:
            return self._publish(ScanResult(success=False, error=NO_IMAGES_ERROR))

        texts = [await self._detect(i, payload) for i, payload in enumerate(images)]
        merged = aggregate(texts)

        if not merged.success:
            result = ScanResult(
                success=False,
                raw_text=merged.combined_raw_text,
                error=NOTHING_FOUND_ERROR,
            )
            return self._publish(result)

        status = None
        if self._alert_months is not None and merged.expiration_date is not None:
            status = classify(merged.expiration_date, self._alert_months, today)

        result = ScanResult(
            success=True,
            product_code=merged.product_code,
            expiration_date=merged.expiration_date,
            raw_text=merged.combined_raw_text,
            expiration_status=status,
        )
        logger.info(
            "Scan finished: code=%s date=%s status=%s",
            result.product_code,
            result.expiration_date,
            status.value if status else None,
        )
        return self._publish(result)

    def _publish(self, result: ScanResult) -> ScanResult:
        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception:
                logger.exception("Scan result callback failed")
        return result
