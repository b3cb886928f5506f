# fleetdesk/constants/fleet.py
from __future__ import annotations

# =========================================================
# Car status
# =========================================================
CAR_STATUS_IDLE = "Idle"
CAR_STATUS_ON_RENT = "On Rent"
CAR_STATUS_MAINTENANCE = "Maintenance"

# Declaration order is also the display order
CAR_STATUSES = (CAR_STATUS_IDLE, CAR_STATUS_ON_RENT, CAR_STATUS_MAINTENANCE)

# =========================================================
# Transaction types
# =========================================================
TRANSACTION_RENTAL = "Rental"
TRANSACTION_MAINTENANCE = "Maintenance"

TRANSACTION_TYPES = (TRANSACTION_RENTAL, TRANSACTION_MAINTENANCE)

# =========================================================
# Field limits
# =========================================================
CAR_MODEL_MAXLEN = 100
IMAGE_URL_MAXLEN = 500
DESCRIPTION_MAXLEN = 2000

# =========================================================
# Expiry window / reporting
# =========================================================
EXPIRY_WARNING_DAYS = 30
MONTHLY_SERIES_LENGTH = 6
RECENT_TRANSACTIONS_LIMIT = 5

# Display label for a transaction whose car was deleted
UNKNOWN_CAR_LABEL = "Unknown Car"

# =========================================================
# Car images
# =========================================================
IMAGE_MAX_BYTES = 5 * 1024 * 1024
IMAGE_MIME_PREFIX = "image/"
