from __future__ import annotations

import pytest

from fleetdesk import create_app
from fleetdesk.cli import create_admin_user
from fleetdesk.extensions import db

ADMIN_EMAIL = "admin@fleet.test"
ADMIN_PASSWORD = "correct-horse"


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "RATELIMIT_ENABLED": False,
            "IMAGE_STORAGE_BACKEND": "local",
            "CAR_IMAGES_DIR": str(tmp_path / "car-images"),
            "PUBLIC_BASE_URL": "http://fleet.test",
        }
    )

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app, client):
    create_admin_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client
