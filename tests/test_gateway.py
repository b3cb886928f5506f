from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from fleetdesk.extensions import db
from fleetdesk.models import Car
from fleetdesk.services.gateway import CARS, TRANSACTIONS, GatewayError, RecordNotFound, SqlGateway
from fleetdesk.services.records import RecordShapeError, car_record_from_row, transaction_record_from_row


def _car_values(**overrides):
    values = {
        "model": "Toyota Camry",
        "purchase_date": date(2024, 1, 15),
        "purchase_price": Decimal("25000.00"),
        "road_tax_expiry": date(2026, 6, 1),
        "insurance_expiry": date(2026, 9, 1),
        "status": "Idle",
        "image_url": None,
    }
    values.update(overrides)
    return values


@pytest.fixture
def gateway(app):
    return SqlGateway()


def test_insert_and_get_car(gateway):
    car = gateway.insert(CARS, _car_values())
    assert car.model == "Toyota Camry"
    assert car.purchase_price == Decimal("25000.00")
    assert gateway.get(CARS, car.id) == car


def test_insert_ignores_unknown_columns(gateway):
    car = gateway.insert(CARS, _car_values(id="not-yours", colour="red"))
    assert car.id != "not-yours"


def test_list_is_newest_first(gateway):
    for model, created in [
        ("Old", datetime(2025, 1, 1)),
        ("Newest", datetime(2026, 1, 1)),
        ("Middle", datetime(2025, 6, 1)),
    ]:
        db.session.add(Car(created_at=created, **_car_values(model=model)))
    db.session.commit()

    assert [c.model for c in gateway.list(CARS)] == ["Newest", "Middle", "Old"]


def test_update_car(gateway):
    car = gateway.insert(CARS, _car_values())
    updated = gateway.update(CARS, car.id, {"status": "Maintenance"})
    assert updated.status == "Maintenance"
    assert updated.model == car.model


def test_missing_and_malformed_ids(gateway):
    with pytest.raises(RecordNotFound):
        gateway.get(CARS, "not-a-uuid")
    with pytest.raises(RecordNotFound):
        gateway.update(CARS, "3f2b1c1e-0000-4000-8000-000000000000", {"status": "Idle"})
    with pytest.raises(RecordNotFound):
        gateway.delete(TRANSACTIONS, "3f2b1c1e-0000-4000-8000-000000000000")


def test_unknown_table(gateway):
    with pytest.raises(GatewayError):
        gateway.list("drivers")


def test_transaction_needs_existing_car(gateway):
    with pytest.raises(RecordNotFound):
        gateway.insert(
            TRANSACTIONS,
            {"car_id": "3f2b1c1e-0000-4000-8000-000000000000", "transaction_type": "Rental", "amount": Decimal("10")},
        )


def test_transaction_resolves_car_model(gateway):
    car = gateway.insert(CARS, _car_values(model="Honda Civic"))
    txn = gateway.insert(
        TRANSACTIONS,
        {"car_id": car.id, "transaction_type": "Rental", "amount": Decimal("500"), "description": "Weekend"},
    )
    assert txn.car_id == car.id
    assert txn.car_model == "Honda Civic"
    assert txn.car_label == "Honda Civic"


def test_transaction_outlives_deleted_car(gateway):
    car = gateway.insert(CARS, _car_values(model="Honda Civic"))
    gateway.insert(TRANSACTIONS, {"car_id": car.id, "transaction_type": "Rental", "amount": Decimal("500")})

    gateway.delete(CARS, car.id)

    assert gateway.list(CARS) == []
    [txn] = gateway.list(TRANSACTIONS)
    assert txn.amount == Decimal("500")
    assert txn.car_model is None
    assert txn.car_label == "Unknown Car"


def test_failed_commit_rolls_back(gateway):
    car = gateway.insert(CARS, _car_values())

    with pytest.raises(GatewayError) as exc_info:
        gateway.insert(TRANSACTIONS, {"car_id": car.id, "transaction_type": "Rental", "amount": Decimal("-1")})
    assert str(exc_info.value) == "Create transaction failed. Please try again."

    assert gateway.list(TRANSACTIONS) == []


def test_upload_without_image_store(gateway):
    with pytest.raises(GatewayError):
        gateway.upload_file(b"\x89PNG", "car.png", "image/png")


# =========================================================
# Row parsing
# =========================================================
def _row(**overrides):
    values = dict(
        id="c1",
        model="Toyota Camry",
        purchase_date=date(2024, 1, 15),
        purchase_price=25000,
        road_tax_expiry=date(2026, 6, 1),
        insurance_expiry=date(2026, 9, 1),
        status="Idle",
        image_url="",
        created_at=datetime(2026, 1, 1),
        updated_at=datetime(2026, 1, 1),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_car_row_is_parsed():
    car = car_record_from_row(_row())
    assert car.purchase_price == Decimal("25000")
    assert car.image_url is None


@pytest.mark.parametrize(
    "overrides",
    [{"status": "Sold"}, {"model": None}, {"purchase_date": "2024-01-15"}, {"purchase_price": "n/a"}],
)
def test_bad_car_rows_are_rejected(overrides):
    with pytest.raises(RecordShapeError):
        car_record_from_row(_row(**overrides))


def test_bad_transaction_type_is_rejected():
    row = SimpleNamespace(
        id="t1", car_id=None, car=None, transaction_type="Refund",
        amount=5, description=None, created_at=datetime(2026, 1, 1),
    )
    with pytest.raises(RecordShapeError):
        transaction_record_from_row(row)
