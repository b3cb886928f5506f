# fleetdesk/models.py
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from flask_login import UserMixin

from .constants.fleet import (
    CAR_MODEL_MAXLEN,
    CAR_STATUS_IDLE,
    CAR_STATUSES,
    IMAGE_URL_MAXLEN,
    TRANSACTION_TYPES,
)
from .extensions import db


# Naive UTC everywhere: the columns are "timestamp without time zone".
def utcnow_naive() -> datetime:
    return datetime.utcnow()


def _in_clause(column: str, values) -> str:
    quoted = ",".join(f"'{v}'" for v in values)
    return f"{column} in ({quoted})"


# =========================================================
# User model (Authentication + Roles)
# =========================================================
class User(UserMixin, db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=False)

    password_hash = db.Column(db.String(255), nullable=False)

    # admin | staff
    role = db.Column(db.String(30), nullable=False, default="admin")

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    __table_args__ = (
        db.UniqueConstraint("email", name="user_email_key"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"


# =========================================================
# Car (fleet vehicle)
# =========================================================
class Car(db.Model):
    __tablename__ = "cars"

    id = db.Column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    model = db.Column(db.String(CAR_MODEL_MAXLEN), nullable=False)
    purchase_date = db.Column(db.Date, nullable=False)
    purchase_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    road_tax_expiry = db.Column(db.Date, nullable=False)
    insurance_expiry = db.Column(db.Date, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=CAR_STATUS_IDLE, index=True)
    image_url = db.Column(db.String(IMAGE_URL_MAXLEN), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, index=True)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utcnow_naive,
        onupdate=utcnow_naive,
    )

    __table_args__ = (
        db.CheckConstraint(_in_clause("status", CAR_STATUSES), name="ck_cars_status"),
        db.CheckConstraint("purchase_price >= 0", name="ck_cars_purchase_price"),
    )

    def __repr__(self) -> str:
        return f"<Car {self.id} {self.model} {self.status}>"


# =========================================================
# Transaction (rental income / maintenance cost)
# =========================================================
class Transaction(db.Model):
    __tablename__ = "transactions"

    id = db.Column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Deleting a car leaves its transactions behind with no resolvable car.
    car_id = db.Column(
        sa.Uuid(as_uuid=True),
        db.ForeignKey("cars.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    car = db.relationship("Car", foreign_keys=[car_id], lazy="joined")

    transaction_type = db.Column(db.String(20), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, index=True)

    __table_args__ = (
        db.CheckConstraint(
            _in_clause("transaction_type", TRANSACTION_TYPES),
            name="ck_transactions_type",
        ),
        db.CheckConstraint("amount >= 0", name="ck_transactions_amount"),
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.id} {self.transaction_type} {self.amount}>"
