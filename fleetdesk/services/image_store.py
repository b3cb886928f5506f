# fleetdesk/services/image_store.py
from __future__ import annotations

import os
import secrets

import requests
from flask import current_app, request

from fleetdesk.constants.fleet import IMAGE_MAX_BYTES, IMAGE_MIME_PREFIX
from fleetdesk.services.gateway import GatewayError


class ImageRejected(ValueError):
    """The upload is not an acceptable car image."""


# =========================================================
# Checks / naming
# =========================================================
def check_image(data: bytes, content_type: str | None) -> None:
    if not (content_type or "").startswith(IMAGE_MIME_PREFIX):
        raise ImageRejected("Please select a valid image file")
    if len(data) > IMAGE_MAX_BYTES:
        raise ImageRejected("Image file must be less than 5MB")


def new_storage_key(filename: str | None) -> str:
    """Random name keeping the original extension, e.g. 'k3J9...x.jpg'."""
    ext = ""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower()
        ext = "".join(ch for ch in ext if ch.isalnum())[:10]
    token = secrets.token_urlsafe(16)
    return f"{token}.{ext}" if ext else token


def _public_base_url() -> str:
    """
    Priority:
      1) PUBLIC_BASE_URL config
      2) request.url_root when serving a request
    """
    cfg = (current_app.config.get("PUBLIC_BASE_URL") or "").strip()
    if cfg:
        return cfg.rstrip("/")
    if request and request.url_root:
        return request.url_root.rstrip("/")
    return "http://127.0.0.1:5000"


# =========================================================
# Backends
# =========================================================
class LocalImageStore:
    """Files under CAR_IMAGES_DIR (default instance/car-images), served by the app."""

    def __init__(self, directory: str | None = None):
        self._directory = directory

    @property
    def directory(self) -> str:
        base = (
            self._directory
            or current_app.config.get("CAR_IMAGES_DIR")
            or os.path.join(current_app.instance_path, "car-images")
        )
        os.makedirs(base, exist_ok=True)
        return base

    def path_for(self, storage_key: str) -> str:
        return os.path.join(self.directory, storage_key)

    def save(self, data: bytes, *, filename: str | None, content_type: str | None) -> str:
        check_image(data, content_type)
        key = new_storage_key(filename)

        try:
            with open(self.path_for(key), "wb") as f:
                f.write(data)
        except OSError as exc:
            current_app.logger.exception("Storing car image %s failed", key)
            raise GatewayError("Failed to upload image") from exc

        return f"{_public_base_url()}/media/car-images/{key}"


class SupabaseImageStore:
    """Supabase Storage bucket (public), reached over its REST API."""

    def __init__(self, base_url: str, api_key: str, bucket: str = "car-images", timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.timeout = timeout

    def public_url(self, storage_key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{storage_key}"

    def save(self, data: bytes, *, filename: str | None, content_type: str | None) -> str:
        check_image(data, content_type)
        key = new_storage_key(filename)

        try:
            r = requests.post(
                f"{self.base_url}/storage/v1/object/{self.bucket}/{key}",
                data=data,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "apikey": self.api_key,
                    "Content-Type": content_type,
                },
                timeout=self.timeout,
            )
            r.raise_for_status()
        except requests.RequestException as exc:
            current_app.logger.exception("Supabase upload of %s failed", key)
            raise GatewayError("Failed to upload image") from exc

        return self.public_url(key)


def image_store_from_config(config) -> LocalImageStore | SupabaseImageStore:
    backend = (config.get("IMAGE_STORAGE_BACKEND") or "local").strip().lower()

    if backend == "supabase":
        url = config.get("SUPABASE_URL")
        key = config.get("SUPABASE_KEY")
        if not url or not key:
            current_app.logger.warning("Supabase storage selected without SUPABASE_URL/SUPABASE_KEY; using local storage.")
            return LocalImageStore()
        return SupabaseImageStore(url, key, bucket=config.get("CAR_IMAGES_BUCKET") or "car-images")

    return LocalImageStore()
