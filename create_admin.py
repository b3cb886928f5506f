import os

from fleetdesk import create_app
from fleetdesk.cli import create_admin_user

EMAIL = os.environ.get("ADMIN_EMAIL", "admin@fleetdesk.local")
PASSWORD = os.environ.get("ADMIN_PASSWORD")

if not PASSWORD:
    raise SystemExit("Set ADMIN_PASSWORD before running this script.")

app = create_app()

with app.app_context():
    print("Creating fleet admin user...")
    admin = create_admin_user(EMAIL, PASSWORD, name="Fleet Admin")
    print("Admin ready:", admin.email)
