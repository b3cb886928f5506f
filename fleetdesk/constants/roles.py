# fleetdesk/constants/roles.py
ROLES = {
    "admin": "Administrator",
    "staff": "Staff",
}

# Roles allowed to read and change fleet data
FLEET_ROLES = {"admin"}
