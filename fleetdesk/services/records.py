# fleetdesk/services/records.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from fleetdesk.constants.fleet import CAR_STATUSES, TRANSACTION_TYPES, UNKNOWN_CAR_LABEL


class RecordShapeError(ValueError):
    """A backend row did not have the shape a record requires."""


# =========================================================
# Types
# =========================================================
@dataclass(frozen=True)
class CarRecord:
    id: str
    model: str
    purchase_date: date
    purchase_price: Decimal
    road_tax_expiry: date
    insurance_expiry: date
    status: str
    image_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        data = asdict(self)
        data["purchase_price"] = float(self.purchase_price)
        for key in ("purchase_date", "road_tax_expiry", "insurance_expiry", "created_at", "updated_at"):
            data[key] = data[key].isoformat()
        return data


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    car_id: Optional[str]
    transaction_type: str
    amount: Decimal
    description: Optional[str]
    created_at: datetime
    # Resolved through the car reference; None once the car is gone
    car_model: Optional[str] = None

    @property
    def car_label(self) -> str:
        return self.car_model or UNKNOWN_CAR_LABEL

    def to_dict(self) -> dict:
        data = asdict(self)
        data["amount"] = float(self.amount)
        data["created_at"] = self.created_at.isoformat()
        data["car_label"] = self.car_label
        return data


# =========================================================
# Strict parsing (fail closed)
# =========================================================
def _require(row: Any, name: str) -> Any:
    value = getattr(row, name, None)
    if value is None:
        raise RecordShapeError(f"{type(row).__name__} is missing {name!r}")
    return value


def _as_date(row: Any, name: str) -> date:
    value = _require(row, name)
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise RecordShapeError(f"{name!r} is not a date: {value!r}")
    return value


def _as_datetime(row: Any, name: str) -> datetime:
    value = _require(row, name)
    if not isinstance(value, datetime):
        raise RecordShapeError(f"{name!r} is not a datetime: {value!r}")
    return value


def _as_decimal(row: Any, name: str) -> Decimal:
    value = _require(row, name)
    try:
        return Decimal(str(value))
    except ArithmeticError as exc:
        raise RecordShapeError(f"{name!r} is not numeric: {value!r}") from exc


def car_record_from_row(row: Any) -> CarRecord:
    status = _require(row, "status")
    if status not in CAR_STATUSES:
        raise RecordShapeError(f"Unexpected car status {status!r}")

    return CarRecord(
        id=str(_require(row, "id")),
        model=str(_require(row, "model")),
        purchase_date=_as_date(row, "purchase_date"),
        purchase_price=_as_decimal(row, "purchase_price"),
        road_tax_expiry=_as_date(row, "road_tax_expiry"),
        insurance_expiry=_as_date(row, "insurance_expiry"),
        status=status,
        image_url=getattr(row, "image_url", None) or None,
        created_at=_as_datetime(row, "created_at"),
        updated_at=_as_datetime(row, "updated_at"),
    )


def transaction_record_from_row(row: Any) -> TransactionRecord:
    transaction_type = _require(row, "transaction_type")
    if transaction_type not in TRANSACTION_TYPES:
        raise RecordShapeError(f"Unexpected transaction type {transaction_type!r}")

    car = getattr(row, "car", None)
    car_id = getattr(row, "car_id", None)

    return TransactionRecord(
        id=str(_require(row, "id")),
        car_id=str(car_id) if car_id is not None else None,
        transaction_type=transaction_type,
        amount=_as_decimal(row, "amount"),
        description=getattr(row, "description", None) or None,
        created_at=_as_datetime(row, "created_at"),
        car_model=getattr(car, "model", None) if car is not None else None,
    )
