# fleetdesk/utils/guards.py

from __future__ import annotations

from functools import wraps
from typing import Callable, Any

from flask import abort
from flask_login import login_required, current_user

from fleetdesk.constants.roles import FLEET_ROLES


def fleet_admin_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """
    Fleet data is restricted to the admin role.
    Anonymous -> 401 (login manager), other roles -> 403.
    """
    @wraps(view)
    @login_required
    def wrapped(*args, **kwargs):
        role = (getattr(current_user, "role", "") or "").strip().lower()
        if role not in FLEET_ROLES:
            abort(403)
        return view(*args, **kwargs)

    return wrapped


def confirmation_given(*sources) -> bool:
    """True when any source (query args, JSON body) carries confirm=true."""
    for source in sources:
        if not source:
            continue
        value = source.get("confirm")
        if value is True or str(value or "").strip().lower() in ("1", "true", "yes"):
            return True
    return False
