# fleetdesk/services/expiry.py
from __future__ import annotations

import enum
import math
from datetime import date, datetime, time
from typing import Optional

from fleetdesk.constants.fleet import EXPIRY_WARNING_DAYS

_SECONDS_PER_DAY = 24 * 3600


class ExpiryState(enum.Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    OK = "ok"

    @property
    def at_risk(self) -> bool:
        return self is not ExpiryState.OK


def utcnow_naive() -> datetime:
    return datetime.utcnow()


def _as_datetime(value: date | datetime) -> datetime:
    # A bare date expires at the start of that day.
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def days_until(value: date | datetime, now: Optional[datetime] = None) -> int:
    """Whole days until value, rounded up (a few hours into a day counts as that day)."""
    now = now or utcnow_naive()
    delta = _as_datetime(value) - now
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


def classify_expiry(value: date | datetime, now: Optional[datetime] = None) -> ExpiryState:
    """
    EXPIRED when value is strictly before now; EXPIRING_SOON when the
    rounded-up day difference is in 1..30; OK otherwise, which includes a
    value exactly equal to now.
    """
    now = now or utcnow_naive()
    when = _as_datetime(value)

    if when < now:
        return ExpiryState.EXPIRED

    days = days_until(when, now)
    if 0 < days <= EXPIRY_WARNING_DAYS:
        return ExpiryState.EXPIRING_SOON
    return ExpiryState.OK


def car_expiry_report(car, now: Optional[datetime] = None) -> dict:
    now = now or utcnow_naive()
    return {
        "road_tax": classify_expiry(car.road_tax_expiry, now),
        "insurance": classify_expiry(car.insurance_expiry, now),
    }


def is_at_risk(car, now: Optional[datetime] = None) -> bool:
    return any(state.at_risk for state in car_expiry_report(car, now).values())
