from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal

from fleetdesk.services.records import CarRecord, TransactionRecord

NOW = datetime(2026, 3, 10, 0, 0)


def make_car(**overrides) -> CarRecord:
    values = dict(
        id=str(uuid.uuid4()),
        model="Toyota Camry",
        purchase_date=date(2024, 1, 15),
        purchase_price=Decimal("25000"),
        road_tax_expiry=(NOW + timedelta(days=200)).date(),
        insurance_expiry=(NOW + timedelta(days=400)).date(),
        status="Idle",
        image_url=None,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    if not isinstance(values["purchase_price"], Decimal):
        values["purchase_price"] = Decimal(str(values["purchase_price"]))
    return CarRecord(**values)


def make_txn(**overrides) -> TransactionRecord:
    values = dict(
        id=str(uuid.uuid4()),
        car_id=str(uuid.uuid4()),
        transaction_type="Rental",
        amount=Decimal("100"),
        description=None,
        created_at=NOW,
        car_model="Toyota Camry",
    )
    values.update(overrides)
    if not isinstance(values["amount"], Decimal):
        values["amount"] = Decimal(str(values["amount"]))
    return TransactionRecord(**values)
