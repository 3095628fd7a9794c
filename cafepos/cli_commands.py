"""
Flask CLI commands.

Commands:
- flask init-db: create tables and seed reference data
- flask create-user: add a staff account
"""
import click
from flask import current_app

from cafepos.database import get_store
from cafepos.exceptions import CafeError
from cafepos.services.seed_service import seed_database
from cafepos.services.user_service import create_user, VALID_ROLES


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables and seed statuses, settings and default accounts."""
        store = get_store()
        store.create_all()
        try:
            seed_database(store.session(), current_app.config)
        finally:
            store.remove()
        click.echo(click.style('Database initialised.', fg='green'))

    @app.cli.command('create-user')
    @click.option('--username', prompt=True, help='Login name')
    @click.option('--name', prompt=True, help='Display name')
    @click.option('--role', type=click.Choice(sorted(VALID_ROLES)), default='cashier', show_default=True)
    @click.option('--salary', type=float, default=0, show_default=True, help='Monthly salary')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
    def create_user_command(username, name, role, salary, password):
        """Create a staff account."""
        store = get_store()
        try:
            user = create_user(store.session(), username, password, name, role, salary)
            click.echo(click.style(f'User {user.username} created (id {user.id}, role {user.role}).', fg='green'))
        except CafeError as e:
            click.echo(click.style(f'Could not create user: {e.message}', fg='red'))
            raise SystemExit(1)
        finally:
            store.remove()
