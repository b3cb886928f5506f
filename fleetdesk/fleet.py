# fleetdesk/fleet.py
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, send_from_directory

from .constants.fleet import MONTHLY_SERIES_LENGTH
from .services.collections import CarCollection, RecordCollection, TransactionCollection
from .services.expiry import car_expiry_report, utcnow_naive
from .services.fleet_views import (
    CarFilters,
    TransactionFilters,
    filter_cars,
    filter_transactions,
    fleet_overview,
    monthly_revenue_series,
    summarize_transactions,
)
from .services.gateway import CARS, RecordNotFound, SqlGateway
from .services.image_store import ImageRejected, LocalImageStore, image_store_from_config
from .services.validation import (
    ValidationError,
    validate_car,
    validate_car_update,
    validate_transaction,
)
from .utils.guards import confirmation_given, fleet_admin_required
from .utils.parsing import parse_decimal

fleet_bp = Blueprint("fleet", __name__, url_prefix="/api")
media = Blueprint("media", __name__, url_prefix="/media")


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _gateway() -> SqlGateway:
    return SqlGateway(image_store=image_store_from_config(current_app.config))


def _json_body() -> dict:
    # Arrays, strings and numbers carry no fields
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _failure(collection: RecordCollection, message: str):
    status = 404 if isinstance(collection.last_failure, RecordNotFound) else 502
    return jsonify({"error": message}), status


def _car_payload(car, now) -> dict:
    data = car.to_dict()
    report = car_expiry_report(car, now)
    data["expiry"] = {name: state.value for name, state in report.items()}
    data["at_risk"] = any(state.at_risk for state in report.values())
    return data


def _loaded(collection: RecordCollection):
    """Refresh a collection; returns an error response or None."""
    error = collection.refresh()
    if error:
        return _failure(collection, error)
    return None


# -------------------------------------------------------------------
# Dashboard
# GET /api/dashboard
# -------------------------------------------------------------------
@fleet_bp.route("/dashboard", methods=["GET"])
@fleet_admin_required
def dashboard():
    gateway = _gateway()
    cars = CarCollection(gateway)
    transactions = TransactionCollection(gateway)

    for collection in (cars, transactions):
        failed = _loaded(collection)
        if failed:
            return failed

    overview = fleet_overview(cars.records, transactions.records, now=utcnow_naive())
    return jsonify(overview.to_dict()), 200


# -------------------------------------------------------------------
# Cars
# GET+POST /api/cars
# GET+PATCH+DELETE /api/cars/<id>
# POST /api/cars/<id>/status
# POST /api/cars/images
# -------------------------------------------------------------------
@fleet_bp.route("/cars", methods=["GET"])
@fleet_admin_required
def cars_list():
    cars = CarCollection(_gateway())
    failed = _loaded(cars)
    if failed:
        return failed

    now = utcnow_naive()
    filters = CarFilters.from_args(request.args)
    visible = filter_cars(cars.records, filters, now)

    return (
        jsonify(
            {
                "cars": [_car_payload(car, now) for car in visible],
                "showing": len(visible),
                "total": len(cars),
                "filters_active": filters.is_active,
            }
        ),
        200,
    )


@fleet_bp.route("/cars", methods=["POST"])
@fleet_admin_required
def cars_create():
    try:
        car_input = validate_car(_json_body())
    except ValidationError as exc:
        return jsonify(exc.to_dict()), 400

    cars = CarCollection(_gateway())
    created, error = cars.add(car_input.as_values())
    if error:
        return _failure(cars, error)

    return jsonify({"car": _car_payload(created, utcnow_naive())}), 201


@fleet_bp.route("/cars/<car_id>", methods=["GET"])
@fleet_admin_required
def cars_view(car_id):
    try:
        car = _gateway().get(CARS, car_id)
    except RecordNotFound as exc:
        return jsonify({"error": str(exc)}), 404
    return jsonify({"car": _car_payload(car, utcnow_naive())}), 200


def _update_car(car_id, data):
    try:
        values = validate_car_update(data)
    except ValidationError as exc:
        return jsonify(exc.to_dict()), 400

    cars = CarCollection(_gateway())
    updated, error = cars.update(car_id, values)
    if error:
        return _failure(cars, error)

    return jsonify({"car": _car_payload(updated, utcnow_naive())}), 200


@fleet_bp.route("/cars/<car_id>", methods=["PATCH", "PUT"])
@fleet_admin_required
def cars_update(car_id):
    return _update_car(car_id, _json_body())


@fleet_bp.route("/cars/<car_id>/status", methods=["POST"])
@fleet_admin_required
def cars_set_status(car_id):
    return _update_car(car_id, {"status": _json_body().get("status")})


@fleet_bp.route("/cars/<car_id>", methods=["DELETE"])
@fleet_admin_required
def cars_delete(car_id):
    if not confirmation_given(request.args, _json_body()):
        return jsonify({"error": "Deleting a car requires confirm=true."}), 400

    cars = CarCollection(_gateway())
    error = cars.remove(car_id)
    if error:
        return _failure(cars, error)

    return jsonify({"message": "Car deleted."}), 200


@fleet_bp.route("/cars/images", methods=["POST"])
@fleet_admin_required
def cars_upload_image():
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        return jsonify({"error": "Please select a valid image file"}), 400

    cars = CarCollection(_gateway())
    url, error = cars.upload_image(upload.read(), upload.filename, upload.mimetype)
    if error:
        if isinstance(cars.last_failure, ImageRejected):
            return jsonify({"error": error}), 400
        return _failure(cars, error)

    return jsonify({"image_url": url}), 201


# -------------------------------------------------------------------
# Transactions
# GET+POST /api/transactions
# DELETE /api/transactions/<id>
# -------------------------------------------------------------------
@fleet_bp.route("/transactions", methods=["GET"])
@fleet_admin_required
def transactions_list():
    transactions = TransactionCollection(_gateway())
    failed = _loaded(transactions)
    if failed:
        return failed

    filters = TransactionFilters.from_args(request.args)
    visible = filter_transactions(transactions.records, filters)

    return (
        jsonify(
            {
                "transactions": [t.to_dict() for t in visible],
                "summary": summarize_transactions(visible).to_dict(),
                "showing": len(visible),
                "total": len(transactions),
                "filters_active": filters.is_active,
            }
        ),
        200,
    )


@fleet_bp.route("/transactions", methods=["POST"])
@fleet_admin_required
def transactions_create():
    gateway = _gateway()

    # Only cars that currently exist can be picked
    cars = CarCollection(gateway)
    failed = _loaded(cars)
    if failed:
        return failed

    try:
        txn_input = validate_transaction(_json_body(), car_ids=cars.ids())
    except ValidationError as exc:
        return jsonify(exc.to_dict()), 400

    transactions = TransactionCollection(gateway)
    created, error = transactions.add(txn_input.as_values())
    if error:
        return _failure(transactions, error)

    return jsonify({"transaction": created.to_dict()}), 201


@fleet_bp.route("/transactions/<transaction_id>", methods=["DELETE"])
@fleet_admin_required
def transactions_delete(transaction_id):
    if not confirmation_given(request.args, _json_body()):
        return jsonify({"error": "Deleting a transaction requires confirm=true."}), 400

    transactions = TransactionCollection(_gateway())
    error = transactions.remove(transaction_id)
    if error:
        return _failure(transactions, error)

    return jsonify({"message": "Transaction deleted."}), 200


# -------------------------------------------------------------------
# Reports
# GET /api/reports/monthly
# -------------------------------------------------------------------
@fleet_bp.route("/reports/monthly", methods=["GET"])
@fleet_admin_required
def reports_monthly():
    transactions = TransactionCollection(_gateway())
    failed = _loaded(transactions)
    if failed:
        return failed

    months = parse_decimal(request.args.get("months"))
    months = int(months) if months is not None else MONTHLY_SERIES_LENGTH
    visible = filter_transactions(transactions.records, TransactionFilters.from_args(request.args))
    series = monthly_revenue_series(visible, months=max(1, min(months, 24)))
    return jsonify({"months": [m.to_dict() for m in series]}), 200


# -------------------------------------------------------------------
# Car images (local storage backend)
# GET /media/car-images/<name>
# -------------------------------------------------------------------
@media.route("/car-images/<path:filename>", methods=["GET"])
def car_image(filename):
    return send_from_directory(LocalImageStore().directory, filename)
