# Overview: Service-layer operations for permissions; role grants and permission checks.

"""
Permission Checking

Role-based access control over the central policy table:
- Permission rows hold the "resource:action" codes from
  permissions/definitions.py
- RolePermission rows grant codes to the fixed roles
  (admin, manager, cashier, kitchen)

Checks fail closed: a code is allowed only if the user's role has an
explicit grant. Denials are logged; grants are not.
"""

from flask import current_app

from ..extensions import db
from ..models import ROLES, Permission, RolePermission, User
from ..permissions import PERMISSION_DEFINITIONS, DEFAULT_ROLE_PERMISSIONS


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


def get_role_permissions(role: str) -> set[str]:
    """Permission codes granted to one role."""
    rows = (
        db.session.query(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role == role)
        .all()
    )
    return {code for (code,) in rows}


def get_user_permissions(user_id: int) -> set[str]:
    """
    Get all permission codes for a user.

    Inactive or unknown users have no permissions.
    """
    user = db.session.get(User, user_id)
    if not user or not user.is_active:
        return set()
    return get_role_permissions(user.role)


def user_has_permission(user_id: int, permission_code: str) -> bool:
    """Core permission check. Used by decorators and manual checks."""
    return permission_code in get_user_permissions(user_id)


def require_permission(user_id: int, permission_code: str, resource: str | None = None) -> None:
    """
    Require user to have permission, raise PermissionDeniedError if not.

    Usage:
        require_permission(user.id, "orders:create", resource="/api/orders")
    """
    if not user_has_permission(user_id, permission_code):
        current_app.logger.warning(
            "Permission denied: user=%s permission=%s resource=%s",
            user_id, permission_code, resource,
        )
        raise PermissionDeniedError(f"Permission denied: {permission_code}")


def initialize_permissions():
    """
    Create Permission records for every code in PERMISSION_DEFINITIONS.

    Idempotent: Safe to run multiple times. Returns how many were created.
    """
    created_count = 0

    for code, name, description, category in PERMISSION_DEFINITIONS:
        existing = db.session.query(Permission).filter_by(code=code).first()

        if not existing:
            permission = Permission(
                code=code,
                name=name,
                description=description,
                category=category
            )
            db.session.add(permission)
            created_count += 1

    db.session.commit()
    return created_count


def assign_default_role_permissions():
    """
    Grant DEFAULT_ROLE_PERMISSIONS to each role.

    Idempotent: skips existing grants and unknown codes.
    """
    created_count = 0
    permissions = {p.code: p for p in db.session.query(Permission).all()}

    for role_name, permission_codes in DEFAULT_ROLE_PERMISSIONS.items():
        granted = get_role_permissions(role_name)

        for permission_code in permission_codes:
            permission = permissions.get(permission_code)
            if not permission or permission_code in granted:
                continue

            db.session.add(RolePermission(role=role_name, permission_id=permission.id))
            created_count += 1

    db.session.commit()
    return created_count


def _resolve(role_name: str, permission_code: str) -> Permission:
    if role_name not in ROLES:
        raise ValueError(f"Role '{role_name}' not found")

    permission = db.session.query(Permission).filter_by(code=permission_code).first()
    if not permission:
        raise ValueError(f"Permission '{permission_code}' not found")
    return permission


def grant_permission_to_role(role_name: str, permission_code: str) -> RolePermission:
    """Grant a permission to a role."""
    permission = _resolve(role_name, permission_code)

    existing = db.session.query(RolePermission).filter_by(
        role=role_name,
        permission_id=permission.id
    ).first()

    if existing:
        return existing  # Already granted

    role_permission = RolePermission(role=role_name, permission_id=permission.id)
    db.session.add(role_permission)
    db.session.commit()

    return role_permission


def revoke_permission_from_role(role_name: str, permission_code: str) -> bool:
    """Revoke a permission from a role."""
    permission = _resolve(role_name, permission_code)

    role_permission = db.session.query(RolePermission).filter_by(
        role=role_name,
        permission_id=permission.id
    ).first()

    if role_permission:
        db.session.delete(role_permission)
        db.session.commit()
        return True

    return False  # Wasn't granted in the first place
