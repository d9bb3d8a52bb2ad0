# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/facturador/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create the documents table (idempotent). Prefer `flask db upgrade` in production.
# - python -m flask system storage-info
#   Show the document store selected at startup and record counts per collection.
#
# Demo data:
# - python -m flask seed demo
#   Insert demo products and customers into empty collections.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import COLLECTIONS
from .services.seed_service import seed_demo_data
from .storage import get_gateway


@click.group('system')
def system_group():
    """System bootstrap and inspection commands."""


@system_group.command('init-db')
@with_appcontext
def init_db_command():
    """Create database tables."""
    db.create_all()
    click.echo("Database tables created.")


@system_group.command('storage-info')
@with_appcontext
def storage_info_command():
    """Show the active document store and collection sizes."""
    gateway = get_gateway()
    click.echo(f"Backend: {gateway.backend_name}")
    click.echo(f"Stock writes: {current_app.config.get('LEDGER_STOCK_WRITES')}")
    for collection in COLLECTIONS:
        click.echo(f"  {collection}: {len(gateway.list_all(collection))}")


@click.group('seed')
def seed_group():
    """Demo data commands."""


@seed_group.command('demo')
@with_appcontext
def seed_demo_command():
    """Insert demo products and customers into empty collections."""
    seeded = seed_demo_data(get_gateway())
    click.echo(f"Seeded {seeded['products']} products and {seeded['customers']} customers.")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(seed_group)
