# Overview: Flask CLI command groups for bootstrap and user management.

# backend/shopdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--admin-email admin@shopdesk.local] [--admin-password "Password123!"]
#   Idempotent: creates tables and an admin account if no admin exists.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --email staff@shopdesk.local --password "Password123!" --role staff --name "Asha" --employee-id E-102
#   Create a user (prompts if options are omitted).

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .permissions import ROLE_ADMIN, ROLE_STAFF
from .services.auth_service import create_user, PasswordValidationError
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--admin-email', default='admin@shopdesk.local', help='Email for the initial admin')
@click.option('--admin-password', default='Password123!', help='Password for the initial admin')
@with_appcontext
def init_system(admin_email, admin_password):
    """
    Create tables and, if there is no admin yet, an initial admin account.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing Shopdesk...")

    db.create_all()
    click.echo("PASS Tables ready")

    admin = db.session.query(User).filter_by(role=ROLE_ADMIN).first()
    if admin:
        click.echo(f"PASS Using existing admin: {admin.email}")
        return

    try:
        admin = create_user(
            email=admin_email,
            password=admin_password,
            role=ROLE_ADMIN,
            full_name="Administrator",
        )
    except ValidationError as e:
        click.echo(f"FAIL Could not create admin: {str(e)}")
        return

    click.echo(f"PASS Created admin: {admin.email}")
    click.echo("SECURITY Change the default password before going live")


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

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice([ROLE_ADMIN, ROLE_STAFF]), prompt=True, help='Role')
@click.option('--name', 'full_name', default=None, help='Display name')
@click.option('--employee-id', default=None, help='Employee id shown on the profile card')
@with_appcontext
def create_user_cli(email, password, role, full_name, employee_id):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = create_user(
            email=email,
            password=password,
            role=role,
            full_name=full_name,
            employee_id=employee_id,
        )
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
        return
    except ValueError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")
        return

    click.echo(f"PASS Created user: {user.email} with role '{user.role}'")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Email':<32} {'Name':<22} {'Role':<8} {'Employee':<12} {'Active'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(
            f"{user.id:<5} {user.email:<32} {user.display_name:<22} {user.role:<8} "
            f"{(user.employee_id or '-'):<12} {active_str}"
        )

    click.echo("="*90 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
