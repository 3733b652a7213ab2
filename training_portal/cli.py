# cli.py
"""
Flask CLI commands for the training portal.
"""

import os

import click
from flask import current_app
from flask.cli import with_appcontext

from training_portal.extensions import db


@click.command("init-db")
@with_appcontext
def init_database():
    """Create all database tables."""
    try:
        db.create_all()
        click.echo("Database tables created.")
    except Exception as e:
        click.echo(f"Database initialization failed: {str(e)}", err=True)
        raise


@click.command("create-admin")
@click.option("--email", prompt=True, help="Admin email address")
@click.option("--name", prompt=True, help="Admin display name")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Admin password")
@with_appcontext
def create_admin(email, name, password):
    """Create an admin user, or promote an existing user to admin."""
    from training_portal.services.user_service import UserService

    try:
        user, created = UserService.create_admin(email, name, password)
        if created:
            click.echo(f"Admin user '{user.email}' created successfully!")
        else:
            click.echo(f"Existing user '{user.email}' promoted to admin.")
        click.echo(f"   Name: {user.name}")
        click.echo(f"   Role: {user.role}")
    except Exception as e:
        click.echo(f"Error creating admin user: {str(e)}", err=True)
        raise


@click.command("sync-registration-flags")
@click.option("--dry-run", is_flag=True, help="Show what would be done without making changes")
@with_appcontext
def sync_registration_flags(dry_run):
    """
    Close registration on every training that has no slots left.

    Example usage:
        flask sync-registration-flags --dry-run   # Preview changes
        flask sync-registration-flags             # Apply after confirmation
    """
    from training_portal.services.training_service import sync_registration_flags as sync_flags
    from training_portal.services.training_state import TrainingState

    state = TrainingState()
    if not state.load():
        click.echo("Could not load trainings - check the logs", err=True)
        return

    pending = sync_flags(state, dry_run=True)
    if not pending:
        click.echo("All registration flags are already consistent.")
        return

    click.echo(f"{len(pending)} training(s) are full but still open for registration:")
    for training in pending:
        click.echo(f"   {training['name']} ({training['id']}): "
                   f"{training['available_slots']}/{training['max_registrations']} slots")

    if dry_run:
        click.echo("Dry run - no changes made.")
        return

    if not click.confirm("Close registration for these trainings?"):
        click.echo("Aborted.")
        return

    closed = sync_flags(state)
    current_app.logger.info(f"Closed registration for {len(closed)} full training(s)")
    click.echo(f"Closed registration for {len(closed)} training(s).")


@click.command("export-enrollments")
@click.option("--format", "fmt", type=click.Choice(['csv', 'xlsx']), default='xlsx', help="Output format")
@click.option("--training-id", default=None, help="Only export enrollments of this training")
@click.option("--output-dir", default='.', type=click.Path(file_okay=False), help="Directory to write to")
@with_appcontext
def export_enrollments(fmt, training_id, output_dir):
    """Write the enrollment export to a CSV or Excel file."""
    from training_portal.services.projection import RegistrationFilters, project_registrations
    from training_portal.services.training_state import TrainingState
    from training_portal.utils.export_data import prepare_enrollment_export_rows, render_export

    state = TrainingState()
    if not state.load():
        click.echo("Could not load enrollments - check the logs", err=True)
        return

    registrations = project_registrations(
        state.registrations, RegistrationFilters(training_id=training_id or 'all'), state.trainings
    )
    rows = prepare_enrollment_export_rows(registrations, state.trainings, state.categories)

    try:
        content, filename, _ = render_export(rows, fmt)
    except ValueError as e:
        click.echo(f"Export failed: {str(e)}", err=True)
        return

    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    with open(path, 'wb') as f:
        f.write(content)
    click.echo(f"Exported {len(rows)} enrollment(s) to {path}")


def register_cli_commands(app):
    """
    Register all CLI commands with the Flask application.

    Args:
        app: Flask application instance
    """
    app.cli.add_command(init_database)
    app.cli.add_command(create_admin)
    app.cli.add_command(sync_registration_flags)
    app.cli.add_command(export_enrollments)
