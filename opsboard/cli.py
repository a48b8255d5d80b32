"""
Custom Flask CLI commands.

These commands are registered with the app by ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask search-last4 1234 --pages 3   # Run a customer lookup
    flask env-check                     # Show which settings are set
    flask db-check                      # Verify the contact store
"""

import os

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from opsboard.extensions import db
from opsboard.models.contact import Contact
from opsboard.services import customer_search_service
from opsboard.services.errors import SearchValidationError

# Environment variables reported by ``env-check``.  Values are never
# printed, only whether they are set.
_CHECKED_ENV_VARS = (
    "DATABASE_URL",
    "DIRECTORY_API_BASE_URL",
    "DIRECTORY_API_KEY",
    "LOG_LEVEL",
)


@click.command("search-last4")
@click.argument("digits")
@click.option(
    "--pages",
    default=None,
    help="Directory page ceiling (1-20, default from config).",
)
@with_appcontext
def search_last4_command(digits: str, pages: str | None):
    """Look up customers whose phone ends with DIGITS."""
    try:
        params = customer_search_service.parse_search_params(
            {"digits": digits, "pages": pages}
        )
    except SearchValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="DIGITS") from exc

    result = customer_search_service.search_by_last4(params.digits, params.pages)

    click.echo(
        f"Searched *{result.digits} across {result.pages_fetched} "
        f"directory page(s) (ceiling {params.pages})"
    )
    for contact in result.contacts:
        click.echo(
            f"  {contact.id:<24} {contact.contact_name:<30} "
            f"{contact.phone or '-':<18} {contact.date_added}"
        )
    click.echo(f"Matches: {len(result.contacts)}")

    if result.is_partial:
        click.secho(
            f"Degraded sources: {', '.join(result.degraded_sources)}",
            fg="yellow",
        )


@click.command("env-check")
@with_appcontext
def env_check_command():
    """Report which settings are present without printing their values."""
    for name in _CHECKED_ENV_VARS:
        value = os.environ.get(name, "")
        if value:
            click.secho(f"  ✓ {name} is set ({len(value)} chars)", fg="green")
        else:
            click.secho(f"  ✗ {name} is not set", fg="yellow")

    store_state = (
        "enabled" if current_app.config.get("CONTACT_STORE_ENABLED") else "disabled"
    )
    click.echo(f"\n  Contact store: {store_state}")
    click.echo(
        "  Directory: "
        f"{current_app.config['DIRECTORY_API_BASE_URL'].rstrip('/')}/"
        f"{current_app.config['DIRECTORY_CONTACTS_ENDPOINT']}"
    )


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify contact store connectivity and the ``contacts`` table.

    Useful for confirming DATABASE_URL is correct before relying on
    the primary lookup.
    """
    if not current_app.config.get("CONTACT_STORE_ENABLED"):
        click.secho("Contact store is disabled (DATABASE_URL not set).", fg="yellow")
        return

    click.echo("[1/2] Testing connection...")
    try:
        db.session.execute(db.text("SELECT 1"))
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        return
    click.secho("      ✓ Connected.", fg="green")

    click.echo("[2/2] Checking contacts table...")
    try:
        if not inspect(db.engine).has_table(Contact.__tablename__):
            click.secho("      ✗ Table 'contacts' not found.", fg="red")
            click.echo("        Run `flask db upgrade` to create it.")
            return
        count = db.session.execute(
            db.select(db.func.count()).select_from(Contact)
        ).scalar()
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Table check failed: {exc}", fg="red")
        return
    click.secho(f"      ✓ contacts table has {count} row(s).", fg="green")


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(search_last4_command)
    app.cli.add_command(env_check_command)
    app.cli.add_command(db_check_command)
