# fleetdesk/services/validation.py
"""
Input validation for car and transaction submissions.

Every validator walks its fields in declaration order and stops at the first
broken rule, raising ValidationError. Nothing here touches the database, so
a rejected submission never reaches the gateway.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Container, Mapping, Optional

from fleetdesk.constants.fleet import (
    CAR_MODEL_MAXLEN,
    CAR_STATUSES,
    DESCRIPTION_MAXLEN,
    IMAGE_URL_MAXLEN,
    TRANSACTION_TYPES,
)
from fleetdesk.utils.parsing import clean_str, parse_date, parse_decimal, parse_uuid

LOGIN_PASSWORD_MINLEN = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(ValueError):
    """First rule violated by a submission."""

    def __init__(self, field: str, rule: str, message: str):
        super().__init__(message)
        self.field = field
        self.rule = rule
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "field": self.field, "rule": self.rule}


# =========================================================
# Normalized inputs
# =========================================================
@dataclass(frozen=True)
class CarInput:
    model: str
    purchase_date: date
    purchase_price: Decimal
    road_tax_expiry: date
    insurance_expiry: date
    status: str
    image_url: Optional[str] = None

    def as_values(self) -> dict:
        return {
            "model": self.model,
            "purchase_date": self.purchase_date,
            "purchase_price": self.purchase_price,
            "road_tax_expiry": self.road_tax_expiry,
            "insurance_expiry": self.insurance_expiry,
            "status": self.status,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class TransactionInput:
    car_id: str
    transaction_type: str
    amount: Decimal
    description: Optional[str] = None

    def as_values(self) -> dict:
        return {
            "car_id": self.car_id,
            "transaction_type": self.transaction_type,
            "amount": self.amount,
            "description": self.description,
        }


# =========================================================
# Field rules
# =========================================================
def _model(value: Any) -> str:
    model = clean_str(value)
    if not model:
        raise ValidationError("model", "required", "Model is required")
    if len(model) > CAR_MODEL_MAXLEN:
        raise ValidationError("model", "max_length", "Model too long")
    return model


def _required_date(field: str, label: str) -> Callable[[Any], date]:
    def rule(value: Any) -> date:
        if not clean_str(value) and not isinstance(value, date):
            raise ValidationError(field, "required", f"{label} is required")
        parsed = parse_date(value)
        if parsed is None:
            raise ValidationError(field, "invalid_date", f"{label} must be a valid date")
        return parsed

    return rule


def _non_negative(field: str, label: str) -> Callable[[Any], Decimal]:
    def rule(value: Any) -> Decimal:
        amount = parse_decimal(value)
        if amount is None:
            raise ValidationError(field, "number", f"{label} must be a number")
        if amount < 0:
            raise ValidationError(field, "min", f"{label} must be positive")
        return amount

    return rule


def _choice(field: str, choices: tuple) -> Callable[[Any], str]:
    def rule(value: Any) -> str:
        v = clean_str(value)
        if v not in choices:
            raise ValidationError(field, "choice", f"{field.replace('_', ' ').capitalize()} must be one of: {', '.join(choices)}")
        return v

    return rule


def _image_url(value: Any) -> Optional[str]:
    url = clean_str(value)
    if not url:
        return None
    if len(url) > IMAGE_URL_MAXLEN:
        raise ValidationError("image_url", "max_length", "Image URL too long")
    return url


# Declaration order is the evaluation order.
CAR_RULES: tuple[tuple[str, Callable[[Any], Any]], ...] = (
    ("model", _model),
    ("purchase_date", _required_date("purchase_date", "Purchase date")),
    ("purchase_price", _non_negative("purchase_price", "Price")),
    ("road_tax_expiry", _required_date("road_tax_expiry", "Road tax expiry")),
    ("insurance_expiry", _required_date("insurance_expiry", "Insurance expiry")),
    ("status", _choice("status", CAR_STATUSES)),
    ("image_url", _image_url),
)


def validate_car(data: Mapping[str, Any]) -> CarInput:
    values = {field: rule(data.get(field)) for field, rule in CAR_RULES}
    return CarInput(**values)


def validate_car_update(data: Mapping[str, Any]) -> dict:
    """
    Validate a partial car edit. Only supplied fields are checked (still in
    declaration order); unknown keys are ignored.
    """
    values = {field: rule(data.get(field)) for field, rule in CAR_RULES if field in data}
    if not values:
        raise ValidationError("", "empty", "Nothing to update")
    return values


def validate_transaction(
    data: Mapping[str, Any],
    car_ids: Optional[Container[str]] = None,
) -> TransactionInput:
    """
    car_ids, when given, is the set of cars the user can pick from; a car_id
    outside it is rejected the same way as a missing one.
    """
    car_id = clean_str(data.get("car_id"))
    # Same car however the id is spelled (case, braces, urn:uuid:)
    car_id = parse_uuid(car_id) or car_id
    if not car_id or (car_ids is not None and car_id not in car_ids):
        raise ValidationError("car_id", "required", "Car is required")

    transaction_type = _choice("transaction_type", TRANSACTION_TYPES)(data.get("transaction_type"))
    amount = _non_negative("amount", "Amount")(data.get("amount"))

    description = clean_str(data.get("description")) or None
    if description and len(description) > DESCRIPTION_MAXLEN:
        raise ValidationError("description", "max_length", "Description too long")

    return TransactionInput(
        car_id=car_id,
        transaction_type=transaction_type,
        amount=amount,
        description=description,
    )


def validate_login(data: Mapping[str, Any]) -> tuple[str, str]:
    email = clean_str(data.get("email")).lower()
    password = data.get("password") or ""

    if not _EMAIL_RE.match(email):
        raise ValidationError("email", "email", "Invalid email format")
    if len(password) < LOGIN_PASSWORD_MINLEN:
        raise ValidationError(
            "password",
            "min_length",
            f"Password must be at least {LOGIN_PASSWORD_MINLEN} characters",
        )
    return email, password
