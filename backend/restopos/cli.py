# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/restopos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--tables 10]
#   Idempotent bootstrap: creates tables, permissions, role grants, default users and dining tables.
# - python -m flask system init-permissions
#   Initialize permissions and assign defaults to roles.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list [--role cashier]
# - python -m flask users create --email admin@restopos.local --full-name "Admin" --password "Password123!" --role admin
#
# Permission inspection/repair:
# - python -m flask perms list [--role cashier | --category INVENTORY]
# - python -m flask perms check cashier@restopos.local orders:create
# - python -m flask perms grant cashier inventory:read
# - python -m flask perms revoke cashier inventory:read
#
# Dining tables:
# - python -m flask tables list [--all]
# - python -m flask tables create --number 12 --seats 6 --name "Patio 2"
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions
#   Delete expired/revoked sessions older than 30 days.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import ROLES, Permission, User
from .permissions import split_permission_code, validate_permission_code
from .services import permission_service, session_service, table_service, user_service
from .services.auth_service import PasswordValidationError
from .services.table_service import TableError
from .services.user_service import UserValidationError


DEFAULT_PASSWORD = "Password123!"

DEFAULT_USERS = [
    ("admin@restopos.local", "Admin", "admin"),
    ("manager@restopos.local", "Manager", "manager"),
    ("cashier@restopos.local", "Cashier", "cashier"),
    ("kitchen@restopos.local", "Kitchen", "kitchen"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--tables', 'table_count', type=int, default=10, show_default=True,
              help='Dining tables to create when none exist')
@with_appcontext
def init_system(table_count):
    """
    Initialize RestoPOS: schema, permissions, default users and tables.

    Default users (all with password "Password123!"):
    admin, manager, cashier and kitchen @restopos.local

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing RestoPOS...")

    db.create_all()

    click.echo("\nSECURITY Initializing permissions...")
    perm_count = permission_service.initialize_permissions()
    assignment_count = permission_service.assign_default_role_permissions()
    click.echo(f"PASS Created {perm_count} permissions, {assignment_count} role assignments")

    click.echo("\nUSERS Creating default users...")
    for email, full_name, role in DEFAULT_USERS:
        if db.session.query(User).filter_by(email=email).first():
            click.echo(f"WARN  User '{email}' already exists, skipping...")
            continue
        try:
            user_service.create_user(
                email=email,
                password=DEFAULT_PASSWORD,
                full_name=full_name,
                role=role,
            )
            click.echo(f"PASS Created user: {email} with role '{role}'")
        except (UserValidationError, PasswordValidationError) as e:
            click.echo(f"FAIL Failed to create user '{email}': {str(e)}")

    if not table_service.list_tables(include_inactive=True):
        for number in range(1, table_count + 1):
            table_service.create_table(number=number)
        click.echo(f"\nPASS Created {table_count} dining tables")

    click.echo("\n" + "="*60)
    click.echo("DONE RestoPOS Initialized Successfully!")
    click.echo("="*60)
    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for email, _, role in DEFAULT_USERS:
        click.echo(f"   {role:<9} -> {email:<26} / {DEFAULT_PASSWORD}")
    click.echo("")


@system_group.command('init-permissions')
@with_appcontext
def init_permissions():
    """Initialize permissions and assign defaults to roles."""
    perm_count = permission_service.initialize_permissions()
    assignment_count = permission_service.assign_default_role_permissions()
    click.echo(f"PASS Created {perm_count} permissions, {assignment_count} role assignments")


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


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLES), help='Filter by role')
@with_appcontext
def list_users(role):
    """List all users with their role and active status."""
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Email':<32} {'Name':<25} {'Role':<10} {'Active'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.email:<32} {user.full_name:<25} {user.role:<10} {active_str}")

    click.echo("="*90 + "\n")


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--full-name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), prompt=True, help='Role')
@with_appcontext
def create_user_cli(email, full_name, password, role):
    """Create a user (prompts if options are omitted)."""
    try:
        user = user_service.create_user(
            email=email,
            password=password,
            full_name=full_name,
            role=role,
        )
        click.echo(f"PASS Created user: {user.email} with role '{user.role}' (ID: {user.id})")
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
    except UserValidationError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")


@click.group('perms')
def perms_group():
    """Permission inspection and repair commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(ROLES), help='Filter by role name')
@click.option('--category', help='Filter by category')
@with_appcontext
def list_permissions_cli(role, category):
    """List all permissions, optionally filtered by role or category."""
    query = db.session.query(Permission)
    if role:
        codes = permission_service.get_role_permissions(role)
        query = query.filter(Permission.code.in_(codes))
        title = f"Permissions for role: {role.upper()}"
    elif category:
        query = query.filter_by(category=category)
        title = f"Permissions in category: {category}"
    else:
        title = "All Permissions"

    perms = query.order_by(Permission.code).all()

    click.echo(f"\n{'='*80}")
    click.echo(title)
    click.echo(f"{'='*80}\n")

    # Grouped by resource ("orders", "inventory", ...)
    current_resource = None
    for perm in perms:
        resource, action = split_permission_code(perm.code)
        if resource != current_resource:
            if current_resource:
                click.echo("")
            click.echo(f"RESOURCE {resource}")
            click.echo("-"*80)
            current_resource = resource
        click.echo(f"  {action:<12} {perm.code:<28} {perm.name}")

    click.echo(f"\n Total: {len(perms)} permissions\n")


@perms_group.command('grant')
@click.argument('role_name')
@click.argument('permission_code')
@with_appcontext
def grant_permission_cli(role_name, permission_code):
    """Grant a permission to a role."""
    try:
        permission_service.grant_permission_to_role(role_name, permission_code)
        click.echo(f"PASS Granted '{permission_code}' to role '{role_name}'")
    except ValueError as e:
        click.echo(f"FAIL Error: {str(e)}")


@perms_group.command('revoke')
@click.argument('role_name')
@click.argument('permission_code')
@with_appcontext
def revoke_permission_cli(role_name, permission_code):
    """Revoke a permission from a role."""
    try:
        revoked = permission_service.revoke_permission_from_role(role_name, permission_code)
        if revoked:
            click.echo(f"PASS Revoked '{permission_code}' from role '{role_name}'")
        else:
            click.echo(f"WARN  Permission '{permission_code}' was not granted to '{role_name}'")
    except ValueError as e:
        click.echo(f"FAIL Error: {str(e)}")


@perms_group.command('check')
@click.argument('email')
@click.argument('permission_code')
@with_appcontext
def check_permission_cli(email, permission_code):
    """Check if a user has a specific permission."""
    if not validate_permission_code(permission_code):
        click.echo(f"WARN  '{permission_code}' is not a defined permission code")

    user = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if not user:
        click.echo(f"FAIL User '{email}' not found")
        return

    if permission_service.user_has_permission(user.id, permission_code):
        click.echo(f"PASS User '{email}' HAS permission '{permission_code}'")
    else:
        click.echo(f"FAIL User '{email}' DOES NOT HAVE permission '{permission_code}'")

    all_perms = permission_service.get_user_permissions(user.id)
    click.echo(f"\nUser role: {user.role}")
    click.echo(f"Total permissions: {len(all_perms)}")


@click.group('tables')
def tables_group():
    """Dining table commands."""


@tables_group.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Show inactive tables too')
@with_appcontext
def list_tables_cli(show_all):
    tables = table_service.list_tables(include_inactive=show_all)
    if not tables:
        click.echo("No tables found.")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{'ID':<5} {'Number':<8} {'Name':<25} {'Seats':<6} {'Active'}")
    click.echo("="*60)
    for table in tables:
        active_str = "Yes" if table.is_active else "No"
        click.echo(f"{table.id:<5} {table.number:<8} {table.name or '-':<25} {table.seats:<6} {active_str}")
    click.echo("="*60 + "\n")


@tables_group.command('create')
@click.option('--number', type=int, required=True, help='Table number (unique)')
@click.option('--seats', type=int, default=4, show_default=True)
@click.option('--name', help='Display name, e.g. "Patio 2"')
@with_appcontext
def create_table_cli(number, seats, name):
    try:
        table = table_service.create_table(number=number, seats=seats, name=name)
        click.echo(f"PASS Created table {table.number} (ID: {table.id})")
    except TableError as e:
        click.echo(f"FAIL {str(e)}")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions_cli():
    """Delete expired or revoked sessions older than 30 days."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"Deleted {deleted} expired or revoked sessions.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(tables_group)
    app.cli.add_command(maintenance_group)
