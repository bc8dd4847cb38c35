# Overview: Service-layer operations for staff accounts (admin user management).

"""
User Management

Accounts are created by an admin (there is no self-signup). Deleting a user
is a soft delete: is_active=False, deleted_at stamped, and every open
session revoked, so orders and movements keep a valid author.
"""

from __future__ import annotations

from ..extensions import db
from ..models import ROLES, User
from ..validation import EMAIL_RE
from restopos.time_utils import utcnow
from .auth_service import hash_password
from .session_service import revoke_all_user_sessions


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class UserNotFoundError(Exception):
    """Raised when a user is not found."""
    pass


class UserValidationError(Exception):
    """Raised when user data fails validation."""
    pass


def _normalize_email(email) -> str:
    if not isinstance(email, str) or not email.strip():
        raise UserValidationError("email is required")
    email = email.strip().lower()
    if not EMAIL_RE.match(email):
        raise UserValidationError("email is not a valid email address")
    return email


def _check_role(role) -> str:
    if role not in ROLES:
        raise UserValidationError(f"role must be one of: {', '.join(ROLES)}")
    return role


def _check_email_free(email: str, exclude_user_id: int | None = None) -> None:
    query = db.session.query(User).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if query.first():
        raise UserValidationError("A user with this email already exists")


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise UserNotFoundError(f"User {user_id} not found")
    return user


def list_users(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    role: str | None = None,
    include_deleted: bool = False,
) -> dict:
    """
    Paginated user listing, newest first.

    Returns {"data": [...], "pagination": {page, limit, total, pages}}.
    """
    if role is not None:
        _check_role(role)

    page = max(page, 1)
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role)
    if not include_deleted:
        query = query.filter(User.deleted_at.is_(None))

    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "data": [u.to_dict() for u in users],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


def create_user(
    email: str,
    password: str,
    full_name: str,
    role: str,
    created_by_user_id: int | None = None,
) -> User:
    """
    Create an active user.

    Raises:
        UserValidationError: Missing fields, bad role, duplicate email
        PasswordValidationError: Password too weak
    """
    email = _normalize_email(email)
    if not isinstance(full_name, str) or not full_name.strip():
        raise UserValidationError("full_name is required")
    _check_role(role)
    if not password:
        raise UserValidationError("password is required")
    _check_email_free(email)

    user = User(
        email=email,
        full_name=full_name.strip(),
        role=role,
        password_hash=hash_password(password),
        is_active=True,
        created_by_user_id=created_by_user_id,
    )

    db.session.add(user)
    db.session.commit()
    return user


def update_user(user_id: int, patch: dict) -> User:
    """
    Update email, full_name, role and/or is_active.

    Every field is checked before any is applied. Deactivating a user
    revokes their sessions.
    """
    allowed = {"email", "full_name", "role", "is_active"}
    unknown = sorted(set(patch) - allowed)
    if unknown:
        raise UserValidationError(f"Field not allowed: {', '.join(unknown)}")

    user = get_user(user_id)

    changes = {}
    if "email" in patch:
        email = _normalize_email(patch["email"])
        _check_email_free(email, exclude_user_id=user.id)
        changes["email"] = email
    if "full_name" in patch:
        full_name = patch["full_name"]
        if not isinstance(full_name, str) or not full_name.strip():
            raise UserValidationError("full_name cannot be empty")
        changes["full_name"] = full_name.strip()
    if "role" in patch:
        changes["role"] = _check_role(patch["role"])
    if "is_active" in patch:
        if not isinstance(patch["is_active"], bool):
            raise UserValidationError("is_active must be true or false")
        changes["is_active"] = patch["is_active"]

    for k, v in changes.items():
        setattr(user, k, v)
    db.session.commit()

    if not user.is_active:
        revoke_all_user_sessions(user.id, reason="User account deactivated")
    return user


def delete_user(user_id: int, acting_user_id: int | None = None) -> User:
    """Soft-delete a user and revoke their sessions."""
    if acting_user_id is not None and acting_user_id == user_id:
        raise UserValidationError("You cannot delete your own account")

    user = get_user(user_id)
    if user.deleted_at is None:
        user.is_active = False
        user.deleted_at = utcnow()
        db.session.commit()
        revoke_all_user_sessions(user.id, reason="User deleted")
    return user
