# fleetdesk/utils/parsing.py
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal, InvalidOperation


def clean_str(value) -> str:
    return ("" if value is None else str(value)).strip()


def parse_decimal(val):
    """Decimal from user input; None when blank or not a finite number."""
    if val is None or isinstance(val, bool):
        return None
    try:
        s = str(val).strip()
        if not s:
            return None
        d = Decimal(s)
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


def parse_date(val):
    if isinstance(val, date):
        return val
    try:
        if not val:
            return None
        return date.fromisoformat(str(val).strip()[:10])
    except (TypeError, ValueError):
        return None


def parse_bool(val) -> bool:
    if isinstance(val, bool):
        return val
    return clean_str(val).lower() in ("1", "true", "yes", "on")


def parse_uuid(val):
    """Canonical lowercase UUID string; None when val is not a UUID."""
    try:
        if val is None:
            return None
        s = str(val).strip()
        if not s:
            return None
        return str(uuid.UUID(s))
    except (TypeError, ValueError):
        return None
