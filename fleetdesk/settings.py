# fleetdesk/settings.py
from __future__ import annotations

import os
from typing import Any, Mapping

# Keys that must be present before the app can talk to its backend.
REQUIRED_SETTINGS = ("SECRET_KEY", "SQLALCHEMY_DATABASE_URI")


class ConfigurationError(RuntimeError):
    """Missing or invalid connection settings. Fatal at startup."""


def _normalize_db_url(url: str | None) -> str | None:
    if not url:
        return None
    u = url.strip()

    # Hosted Postgres providers hand out postgres:// URLs
    if u.startswith("postgres://"):
        u = u.replace("postgres://", "postgresql+psycopg2://", 1)

    if u.startswith("postgresql://"):
        u = u.replace("postgresql://", "postgresql+psycopg2://", 1)

    return u


class Config:
    # ======================
    # Core
    # ======================
    SECRET_KEY = os.environ.get("SECRET_KEY")

    # ======================
    # Database
    # ======================
    # Priority:
    # 1) SQLALCHEMY_DATABASE_URI (manual override)
    # 2) DATABASE_URL (hosted)
    _env_db = _normalize_db_url(os.environ.get("DATABASE_URL"))
    _override_db = _normalize_db_url(os.environ.get("SQLALCHEMY_DATABASE_URI"))

    SQLALCHEMY_DATABASE_URI = _override_db or _env_db
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # ======================
    # Flask-Limiter
    # ======================
    RATELIMIT_STORAGE_URI = (
        os.environ.get("LIMITER_STORAGE_URL")
        or os.environ.get("REDIS_URL")
        or "memory://"
    )
    RATELIMIT_HEADERS_ENABLED = True
    LOGIN_RATE_LIMIT = os.environ.get("LOGIN_RATE_LIMIT", "10 per minute")

    # ======================
    # Car images
    # ======================
    # "local" keeps files under CAR_IMAGES_DIR (default: instance/car-images)
    # "supabase" pushes them to a Supabase Storage bucket
    IMAGE_STORAGE_BACKEND = os.environ.get("IMAGE_STORAGE_BACKEND", "local")
    CAR_IMAGES_DIR = os.environ.get("CAR_IMAGES_DIR")
    CAR_IMAGES_BUCKET = os.environ.get("CAR_IMAGES_BUCKET", "car-images")
    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_KEY = os.environ.get("SUPABASE_KEY")

    # Slightly above the 5MB image cap so the storage layer reports the error
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "")
    PREFERRED_URL_SCHEME = os.environ.get("PREFERRED_URL_SCHEME", "https")


def check_required(config: Mapping[str, Any]) -> None:
    """Raise ConfigurationError naming every required key that is unset."""
    missing = [key for key in REQUIRED_SETTINGS if not config.get(key)]
    if missing:
        raise ConfigurationError(
            "Missing required configuration: " + ", ".join(missing)
        )
