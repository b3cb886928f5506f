# fleetdesk/services/gateway.py
from __future__ import annotations

import uuid
from typing import Any, Callable, Mapping, Optional

from flask import current_app
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from fleetdesk.extensions import db
from fleetdesk.models import Car, Transaction
from fleetdesk.services.records import (
    RecordShapeError,
    car_record_from_row,
    transaction_record_from_row,
)

CARS = "cars"
TRANSACTIONS = "transactions"


class GatewayError(RuntimeError):
    """A backend call failed. The message is safe to show to the user."""


class RecordNotFound(GatewayError):
    pass


# =========================================================
# Contract
# =========================================================
class DataGateway:
    """
    What the collections need from a backend. Tables are "cars" and
    "transactions"; list() returns newest first.
    """

    def list(self, table: str) -> list:
        raise NotImplementedError

    def insert(self, table: str, values: Mapping[str, Any]):
        raise NotImplementedError

    def update(self, table: str, record_id: str, values: Mapping[str, Any]):
        raise NotImplementedError

    def delete(self, table: str, record_id: str) -> None:
        raise NotImplementedError

    def upload_file(self, data: bytes, filename: str, content_type: str) -> str:
        raise NotImplementedError


# =========================================================
# SQLAlchemy implementation
# =========================================================
_TABLES: dict[str, tuple[type, Callable[[Any], Any]]] = {
    CARS: (Car, car_record_from_row),
    TRANSACTIONS: (Transaction, transaction_record_from_row),
}

# Columns a caller may write per table
_WRITABLE = {
    CARS: {
        "model",
        "purchase_date",
        "purchase_price",
        "road_tax_expiry",
        "insurance_expiry",
        "status",
        "image_url",
    },
    TRANSACTIONS: {"car_id", "transaction_type", "amount", "description"},
}


def _parse_id(record_id: Any) -> Optional[uuid.UUID]:
    try:
        return record_id if isinstance(record_id, uuid.UUID) else uuid.UUID(str(record_id).strip())
    except (TypeError, ValueError):
        return None


def _commit_or_rollback(action: str) -> None:
    """Commit session; rollback + log + GatewayError on failure."""
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("%s failed", action)
        raise GatewayError(f"{action} failed. Please try again.") from exc


class SqlGateway(DataGateway):
    """Gateway over the app's Flask-SQLAlchemy session."""

    def __init__(self, image_store=None):
        self.image_store = image_store

    def _table(self, table: str):
        try:
            return _TABLES[table]
        except KeyError:
            raise GatewayError(f"Unknown table: {table}") from None

    def _parse(self, parse, row):
        try:
            return parse(row)
        except RecordShapeError as exc:
            current_app.logger.error("Unexpected %s row: %s", type(row).__name__, exc)
            raise GatewayError("The server returned an unexpected record.") from exc

    def _get_row(self, model, record_id):
        pk = _parse_id(record_id)
        row = db.session.get(model, pk) if pk else None
        if row is None:
            raise RecordNotFound(f"{model.__name__} not found.")
        return row

    def _assign(self, table: str, row, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            if key not in _WRITABLE[table]:
                continue
            if key == "car_id":
                value = _parse_id(value)
            setattr(row, key, value)

    def list(self, table: str) -> list:
        model, parse = self._table(table)
        try:
            rows = model.query.order_by(desc(model.created_at)).all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception("Fetch %s failed", table)
            raise GatewayError(f"Failed to fetch {table}.") from exc
        return [self._parse(parse, row) for row in rows]

    def get(self, table: str, record_id: str):
        model, parse = self._table(table)
        return self._parse(parse, self._get_row(model, record_id))

    def insert(self, table: str, values: Mapping[str, Any]):
        model, parse = self._table(table)

        if table == TRANSACTIONS:
            # The car must exist at the time the transaction is recorded
            self._get_row(Car, values.get("car_id"))

        row = model()
        self._assign(table, row, values)
        db.session.add(row)
        _commit_or_rollback(f"Create {model.__name__.lower()}")

        current_app.logger.info("Created %s %s", model.__name__, row.id)
        return self._parse(parse, row)

    def update(self, table: str, record_id: str, values: Mapping[str, Any]):
        model, parse = self._table(table)
        row = self._get_row(model, record_id)

        self._assign(table, row, values)
        db.session.add(row)
        _commit_or_rollback(f"Update {model.__name__.lower()}")
        return self._parse(parse, row)

    def delete(self, table: str, record_id: str) -> None:
        model, _parse = self._table(table)
        row = self._get_row(model, record_id)

        db.session.delete(row)
        _commit_or_rollback(f"Delete {model.__name__.lower()}")
        current_app.logger.info("Deleted %s %s", model.__name__, record_id)

    def upload_file(self, data: bytes, filename: str, content_type: str) -> str:
        if self.image_store is None:
            raise GatewayError("Image storage is not configured.")
        return self.image_store.save(data, filename=filename, content_type=content_type)
