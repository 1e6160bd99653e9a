"""Startup seeding: role rows and the bootstrap administrator.

Seeding is skipped quietly when the schema is not there yet; ``flask seed``
creates the tables first.
"""
from __future__ import annotations

import logging

import click
from flask import Flask, current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect as sa_inspect
from werkzeug.security import generate_password_hash

from .db import create_all, get_engine
from .enums import UserRole
from .models import User, utcnow
from .roles import ADMIN, role_description
from .unit_of_work import UnitOfWork

log = logging.getLogger(__name__)


def tables_ready() -> bool:
    inspector = sa_inspect(get_engine())
    return inspector.has_table("users") and inspector.has_table("roles")


def ensure_roles() -> list[str]:
    """Create missing role rows; returns the names that were created."""
    created: list[str] = []
    with UnitOfWork() as uow:
        for member in UserRole:
            name = member.display_name
            if uow.roles.exists_named(name):
                continue
            uow.roles.ensure(name, role_description(name))
            created.append(name)
        uow.save_changes()
    if created:
        log.info("seeded roles: %s", ", ".join(created))
    return created


def ensure_admin_user(email: str, password: str) -> bool:
    """Create the admin account unless a user with that email exists."""
    if not email or not password:
        return False
    with UnitOfWork() as uow:
        if uow.users.by_email(email) is not None:
            return False
        uow.roles.ensure(ADMIN, role_description(ADMIN))
        uow.users.add(
            User(
                user_name=email,
                email=email,
                first_name="Admin",
                last_name="User",
                password_hash=generate_password_hash(password),
                role=ADMIN,
                is_active=True,
                created_at=utcnow(),
            )
        )
        uow.save_changes()
    log.info("seeded admin user %s", email)
    return True


def run_seed(app: Flask) -> None:
    if not tables_ready():
        log.info("schema not present; skipping seed")
        return
    ensure_roles()
    ensure_admin_user(app.config.get("SEED_ADMIN_EMAIL", ""), app.config.get("SEED_ADMIN_PASSWORD", ""))


@click.command("seed")
@with_appcontext
def seed_command() -> None:
    """Create tables when missing, then seed roles and the admin user."""
    create_all()
    run_seed(current_app)
    click.echo("seed complete")


def init_seed_cli(app: Flask) -> None:
    app.cli.add_command(seed_command)


__all__ = ["tables_ready", "ensure_roles", "ensure_admin_user", "run_seed", "seed_command", "init_seed_cli"]
