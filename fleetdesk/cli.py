# fleetdesk/cli.py
from __future__ import annotations

import click
from flask import Flask

from .constants.roles import ROLES
from .extensions import db
from .models import User
from .utils.passwords import hash_password


def create_admin_user(email: str, password: str, name: str = "Fleet Admin", role: str = "admin") -> User:
    """Create (or reset the password of) a login for the fleet API."""
    email = email.strip().lower()
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")

    user = User.query.filter(db.func.lower(User.email) == email).first()
    if user is None:
        user = User(name=name, email=email, role=role)
        db.session.add(user)

    user.password_hash = hash_password(password)
    user.role = role
    user.is_active = True

    db.session.commit()
    return user


def register_cli(app: Flask) -> None:
    @app.cli.command("create-admin")
    @click.option("--email", prompt=True)
    @click.option("--name", default="Fleet Admin", show_default=True)
    @click.option("--role", type=click.Choice(sorted(ROLES)), default="admin", show_default=True)
    @click.password_option()
    def create_admin(email, name, role, password):
        """Create an admin login (or reset its password)."""
        user = create_admin_user(email, password, name=name, role=role)
        click.echo(f"Admin ready: {user.email} ({user.role})")
