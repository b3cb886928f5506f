from fleetdesk.cli import create_admin_user
from fleetdesk.extensions import db

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def test_fleet_api_requires_login(client):
    resp = client.get("/api/cars")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Authentication required"}


def test_login_and_me(app, client):
    create_admin_user(ADMIN_EMAIL, ADMIN_PASSWORD)

    resp = client.post("/auth/login", json={"email": "Admin@Fleet.test", "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["email"] == ADMIN_EMAIL

    me = client.get("/auth/me").get_json()["user"]
    assert me["role"] == "admin"
    assert me["role_label"] == "Administrator"


def test_login_records_last_login(app, client):
    user = create_admin_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert user.last_login_at is None

    client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    db.session.refresh(user)
    assert user.last_login_at is not None


def test_login_accepts_form_data(app, client):
    create_admin_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    resp = client.post("/auth/login", data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200


def test_wrong_password(app, client):
    create_admin_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong-horse"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid email or password."


def test_unknown_user(client):
    resp = client.post("/auth/login", json={"email": "nobody@fleet.test", "password": "whatever"})
    assert resp.status_code == 401


def test_invalid_login_input(client):
    resp = client.post("/auth/login", json={"email": "admin", "password": "x"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid email format"


def test_inactive_account(app, client):
    user = create_admin_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    user.is_active = False
    db.session.commit()

    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 403


def test_staff_cannot_read_fleet(app, client):
    create_admin_user("staff@fleet.test", "staff-pass", role="staff")
    client.post("/auth/login", json={"email": "staff@fleet.test", "password": "staff-pass"})

    resp = client.get("/api/cars")
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "You do not have access to fleet data."}


def test_logout(admin_client):
    assert admin_client.post("/auth/logout").status_code == 200
    assert admin_client.get("/auth/me").status_code == 401


def test_create_admin_resets_password(app):
    first = create_admin_user(ADMIN_EMAIL, "first-pass")
    again = create_admin_user(" ADMIN@fleet.test ", "second-pass")
    assert again.id == first.id


def test_create_admin_cli(app):
    runner = app.test_cli_runner()
    result = runner.invoke(
        args=["create-admin", "--email", "ops@fleet.test", "--password", "ops-pass-1"]
    )
    assert result.exit_code == 0
    assert "Admin ready: ops@fleet.test (admin)" in result.output


def test_login_with_non_object_json_is_rejected(client):
    for body in (["x"], [1, 2], "abc", 5):
        resp = client.post("/auth/login", json=body)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid email format"
