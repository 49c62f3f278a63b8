"""Expiration status classification against the alert window."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from dateutil.relativedelta import relativedelta


class ExpirationStatus(str, Enum):
    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


STATUS_LABELS: dict[ExpirationStatus, str] = {
    ExpirationStatus.VALID: "Válido",
    ExpirationStatus.EXPIRING_SOON: "Por vencer",
    ExpirationStatus.EXPIRED: "Vencido",
}


MAX_ALERT_MONTHS = 12


def check_alert_months(months: object, name: str = "alert_months") -> int:
    """Return ``months`` if it is a whole number of months from 1 to 12.

    Raises:
        ValueError: If ``months`` is not an integer or is out of range.
    """
    if isinstance(months, bool) or not isinstance(months, int):
        raise ValueError(f"{name} debe ser un número entero (valor: {months!r})")
    if not 1 <= months <= MAX_ALERT_MONTHS:
        raise ValueError(
            f"{name} debe estar entre 1 y {MAX_ALERT_MONTHS} (valor: {months!r})"
        )
    return months


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def alert_window_end(today: date, alert_months: int) -> date:
    """Return ``today`` plus ``alert_months`` calendar months.

    Month ends are clamped (Jan 31 + 1 month is Feb 28 or 29).
    """
    return today + relativedelta(months=alert_months)


def classify(
    expiration_date: date | datetime | str,
    alert_months: int = 3,
    today: date | datetime | None = None,
) -> ExpirationStatus:
    """Classify an expiration date as expired, expiring soon or valid.

    Only calendar dates are compared; any time of day is dropped.
    A date that falls exactly on the end of the alert window counts as
    expiring soon. Today itself is never expired.

    Raises:
        ValueError: If ``alert_months`` is lower than 1.
    """
    if alert_months < 1:
        raise ValueError(f"alert_months must be at least 1, got {alert_months}")

    expires = _as_date(expiration_date)
    current = _as_date(today) if today is not None else date.today()

    if expires < current:
        return ExpirationStatus.EXPIRED
    if expires <= alert_window_end(current, alert_months):
        return ExpirationStatus.EXPIRING_SOON
    return ExpirationStatus.VALID


def status_label(status: ExpirationStatus) -> str:
    """Spanish display label for a status."""
    return STATUS_LABELS[status]
