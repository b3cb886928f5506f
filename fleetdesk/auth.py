# fleetdesk/auth.py
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError

from .constants.roles import ROLES
from .extensions import db, limiter
from .models import User, utcnow_naive
from .services.validation import ValidationError, validate_login
from .utils.passwords import verify_password

auth = Blueprint("auth", __name__, url_prefix="/auth")


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "role_label": ROLES.get(user.role, user.role),
    }


def _login_limit() -> str:
    return current_app.config.get("LOGIN_RATE_LIMIT", "10 per minute")


# =========================================================
# Login / Logout
# =========================================================
@auth.route("/login", methods=["POST"])
@limiter.limit(_login_limit)
def login():
    if getattr(current_user, "is_authenticated", False):
        return jsonify({"user": _user_payload(current_user)}), 200

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form

    try:
        email, password = validate_login(data)
    except ValidationError as exc:
        return jsonify(exc.to_dict()), 400

    user = User.query.filter(db.func.lower(User.email) == email).first()

    if user and user.is_active is False:
        current_app.logger.warning("Login attempt on inactive account %s", email)
        return jsonify({"error": "This account is inactive. Contact an admin."}), 403

    if not user or not verify_password(user.password_hash, password):
        current_app.logger.warning("Failed login for %s", email)
        return jsonify({"error": "Invalid email or password."}), 401

    login_user(user, remember=bool(data.get("remember")))

    user.last_login_at = utcnow_naive()
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Recording last login for %s failed", email)

    return jsonify({"user": _user_payload(user)}), 200


@auth.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"message": "Logged out."}), 200


@auth.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify({"user": _user_payload(current_user)}), 200
