# fleetdesk/services/fleet_views.py
"""
Derived views over in-memory car and transaction collections.

Filters are stable (input order is kept, nothing is re-sorted) and combine
with AND. Aggregates are plain functions of whatever subset they are given,
so the same helpers serve the full fleet and a filtered list.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Sequence

from fleetdesk.constants.fleet import (
    CAR_STATUS_ON_RENT,
    MONTHLY_SERIES_LENGTH,
    RECENT_TRANSACTIONS_LIMIT,
    TRANSACTION_MAINTENANCE,
    TRANSACTION_RENTAL,
)
from fleetdesk.services.expiry import is_at_risk, utcnow_naive
from fleetdesk.utils.parsing import clean_str, parse_bool, parse_date, parse_decimal

_ZERO = Decimal("0")
_END_OF_DAY = time(23, 59, 59, 999000)


def _money(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _below(value: Any, bound: Any) -> bool:
    limit = parse_decimal(bound)
    return limit is not None and _money(value) < limit


def _above(value: Any, bound: Any) -> bool:
    limit = parse_decimal(bound)
    return limit is not None and _money(value) > limit


# =========================================================
# Filter criteria
# =========================================================
@dataclass(frozen=True)
class CarFilters:
    status: str = ""
    model: str = ""
    # Bounds stay as given; blank or non-numeric bounds are ignored
    min_price: Any = None
    max_price: Any = None
    expiry_alert: bool = False

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "CarFilters":
        return cls(
            status=clean_str(args.get("status")),
            model=clean_str(args.get("model")),
            min_price=args.get("min_price"),
            max_price=args.get("max_price"),
            expiry_alert=parse_bool(args.get("expiry_alert")),
        )

    def cleared(self) -> "CarFilters":
        return CarFilters()

    @property
    def is_active(self) -> bool:
        return self != CarFilters()


@dataclass(frozen=True)
class TransactionFilters:
    transaction_type: str = ""
    car_model: str = ""
    min_amount: Any = None
    max_amount: Any = None
    start_date: Any = None
    end_date: Any = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "TransactionFilters":
        return cls(
            transaction_type=clean_str(args.get("type") or args.get("transaction_type")),
            car_model=clean_str(args.get("car_model")),
            min_amount=args.get("min_amount"),
            max_amount=args.get("max_amount"),
            start_date=args.get("start_date"),
            end_date=args.get("end_date"),
        )

    def cleared(self) -> "TransactionFilters":
        return TransactionFilters()

    @property
    def is_active(self) -> bool:
        return self != TransactionFilters()


# =========================================================
# Filtering
# =========================================================
def car_matches(car, filters: CarFilters, now: Optional[datetime] = None) -> bool:
    if filters.status and car.status != filters.status:
        return False

    if filters.model and filters.model.lower() not in car.model.lower():
        return False

    if _below(car.purchase_price, filters.min_price):
        return False
    if _above(car.purchase_price, filters.max_price):
        return False

    if filters.expiry_alert and not is_at_risk(car, now):
        return False

    return True


def filter_cars(cars: Sequence, filters: CarFilters, now: Optional[datetime] = None) -> list:
    now = now or utcnow_naive()
    return [car for car in cars if car_matches(car, filters, now)]


def transaction_matches(txn, filters: TransactionFilters) -> bool:
    if filters.transaction_type and txn.transaction_type != filters.transaction_type:
        return False

    if filters.car_model:
        # No resolvable car means nothing to match against
        model = getattr(txn, "car_model", None)
        if not model or filters.car_model.lower() not in model.lower():
            return False

    if _below(txn.amount, filters.min_amount):
        return False
    if _above(txn.amount, filters.max_amount):
        return False

    start = parse_date(filters.start_date)
    if start is not None and txn.created_at < datetime.combine(start, time.min):
        return False

    end = parse_date(filters.end_date)
    if end is not None and txn.created_at > datetime.combine(end, _END_OF_DAY):
        return False

    return True


def filter_transactions(transactions: Sequence, filters: TransactionFilters) -> list:
    return [txn for txn in transactions if transaction_matches(txn, filters)]


# =========================================================
# Aggregates
# =========================================================
@dataclass(frozen=True)
class TransactionSummary:
    total_revenue: Decimal = _ZERO
    total_maintenance: Decimal = _ZERO
    count: int = 0

    @property
    def net_profit(self) -> Decimal:
        return self.total_revenue - self.total_maintenance

    def to_dict(self) -> dict:
        return {
            "total_revenue": float(self.total_revenue),
            "total_maintenance": float(self.total_maintenance),
            "net_profit": float(self.net_profit),
            "count": self.count,
        }


def summarize_transactions(transactions: Iterable) -> TransactionSummary:
    revenue = _ZERO
    maintenance = _ZERO
    count = 0
    for txn in transactions:
        count += 1
        if txn.transaction_type == TRANSACTION_RENTAL:
            revenue += _money(txn.amount)
        elif txn.transaction_type == TRANSACTION_MAINTENANCE:
            maintenance += _money(txn.amount)
    return TransactionSummary(total_revenue=revenue, total_maintenance=maintenance, count=count)


def status_distribution(cars: Iterable) -> "OrderedDict[str, int]":
    """Cars per status, in order of first appearance. Absent statuses are left out."""
    counts: "OrderedDict[str, int]" = OrderedDict()
    for car in cars:
        counts[car.status] = counts.get(car.status, 0) + 1
    return counts


@dataclass(frozen=True)
class MonthlyTotals:
    month: str  # YYYY-MM
    revenue: Decimal = _ZERO
    maintenance: Decimal = _ZERO

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.maintenance

    @property
    def label(self) -> str:
        return date.fromisoformat(f"{self.month}-01").strftime("%b %Y")

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "label": self.label,
            "revenue": float(self.revenue),
            "maintenance": float(self.maintenance),
            "profit": float(self.profit),
        }


def monthly_revenue_series(transactions: Iterable, months: int = MONTHLY_SERIES_LENGTH) -> list[MonthlyTotals]:
    """
    Revenue / maintenance per calendar month of created_at, oldest first,
    trimmed to the most recent `months` months that have any transactions.
    """
    buckets: dict[str, list[Decimal]] = {}
    for txn in transactions:
        key = txn.created_at.strftime("%Y-%m")
        bucket = buckets.setdefault(key, [_ZERO, _ZERO])
        if txn.transaction_type == TRANSACTION_RENTAL:
            bucket[0] += _money(txn.amount)
        else:
            bucket[1] += _money(txn.amount)

    series = [
        MonthlyTotals(month=key, revenue=revenue, maintenance=maintenance)
        for key, (revenue, maintenance) in sorted(buckets.items())
    ]
    return series[-months:] if months > 0 else []


@dataclass
class FleetOverview:
    total_cars: int
    active_rentals: int
    at_risk_cars: int
    summary: TransactionSummary
    statuses: "OrderedDict[str, int]"
    monthly: list[MonthlyTotals] = field(default_factory=list)
    recent: list = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            "total_cars": self.total_cars,
            "active_rentals": self.active_rentals,
            "at_risk_cars": self.at_risk_cars,
            "status_distribution": dict(self.statuses),
            "monthly": [m.to_dict() for m in self.monthly],
            "recent_transactions": [t.to_dict() for t in self.recent],
        }
        data.update(self.summary.to_dict())
        return data


def fleet_overview(
    cars: Sequence,
    transactions: Sequence,
    now: Optional[datetime] = None,
    recent_limit: int = RECENT_TRANSACTIONS_LIMIT,
) -> FleetOverview:
    """Dashboard numbers. `transactions` is expected newest first."""
    now = now or utcnow_naive()
    statuses = status_distribution(cars)
    return FleetOverview(
        total_cars=len(cars),
        active_rentals=statuses.get(CAR_STATUS_ON_RENT, 0),
        at_risk_cars=sum(1 for car in cars if is_at_risk(car, now)),
        summary=summarize_transactions(transactions),
        statuses=statuses,
        monthly=monthly_revenue_series(transactions),
        recent=list(transactions[:recent_limit]),
    )
