# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/pvz/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User bootstrap:
# - python -m flask users create --email moderator@pvz.local --password "Password123!" --role moderator
#   Create a user (prompts if options are omitted).
#
# Pickup points:
# - python -m flask pvz create --city Moscow
#   Register a pickup point.
# - python -m flask pvz list [--page 1] [--limit 10]
#   List pickup points with the open reception, if any.

import click
from flask.cli import with_appcontext

from .container import get_services
from .domain import ALLOWED_CITIES, USER_ROLES
from .errors import DomainError, NoActiveReceptionError
from .extensions import db


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema is up to date")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@click.group('users')
def users_group():
    """User bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(sorted(USER_ROLES)), prompt=True)
@with_appcontext
def create_user_command(email, password, role):
    """Create an employee or moderator account."""
    try:
        user = get_services().identity.register_user(email, password, role)
    except DomainError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"PASS Created {user.role} {user.email} (ID: {user.id})")


@click.group('pvz')
def pvz_group():
    """Pickup point commands."""


@pvz_group.command('create')
@click.option('--city', type=click.Choice(sorted(ALLOWED_CITIES)), required=True)
@with_appcontext
def create_pvz_command(city):
    """Register a pickup point."""
    pvz = get_services().pickup_points.create_pickup_point(city)
    click.echo(f"PASS Created pickup point {pvz.id} in {pvz.city}")


@pvz_group.command('list')
@click.option('--page', default=1, show_default=True)
@click.option('--limit', default=10, show_default=True)
@with_appcontext
def list_pvz_command(page, limit):
    """List pickup points and their open reception."""
    services = get_services()
    points = services.pickup_points.list_pickup_points(page=page, limit=limit)
    if not points:
        click.echo("No pickup points")
        return

    for pvz in points:
        try:
            active = services.receptions.get_active_reception(pvz.id)
            status = f"open reception {active.id}"
        except NoActiveReceptionError:
            status = "no open reception"
        click.echo(f"{pvz.id}  {pvz.city:<18} {pvz.registration_date:%Y-%m-%d %H:%M}  {status}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(pvz_group)
