# Overview: Flask API routes for staff account management.

"""
User management routes.

Accounts are created by an admin; there is no self-registration.
DELETE is a soft delete that also revokes the user's sessions.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_permission
from ..services import permission_service, user_service
from ..services.activity_service import log_activity
from ..services.auth_service import PasswordValidationError
from ..services.user_service import UserNotFoundError, UserValidationError


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("user:read")
def list_users_route():
    """
    Query params:
    - page: int (default 1)
    - limit: int (default 10, max 100)
    - role: admin | manager | cashier | kitchen (optional)
    - include_deleted: "true" to include soft-deleted users
    """
    try:
        result = user_service.list_users(
            page=request.args.get("page", 1, type=int),
            limit=request.args.get("limit", user_service.DEFAULT_PAGE_SIZE, type=int),
            role=request.args.get("role") or None,
            include_deleted=request.args.get("include_deleted", "false").lower() == "true",
        )
        return jsonify(result), 200
    except UserValidationError as e:
        return jsonify({"error": str(e)}), 400


@users_bp.post("")
@require_auth
@require_permission("user:create")
def create_user_route():
    """
    Body: {"email", "password", "full_name", "role"} (all required)
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    missing = [f for f in ("email", "password", "full_name", "role") if not data.get(f)]
    if missing:
        return jsonify({"error": "Missing required fields", "missing": missing}), 400

    try:
        user = user_service.create_user(
            email=data["email"],
            password=data["password"],
            full_name=data["full_name"],
            role=data["role"],
            created_by_user_id=g.current_user.id,
        )
        log_activity(
            g.current_user.id, "create_user",
            f"Created user {user.email} with role {user.role}", "users", user.id,
        )
        return jsonify({"data": user.to_dict(), "message": "User created successfully"}), 201
    except (UserValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission("user:read")
def get_user_route(user_id: int):
    try:
        user = user_service.get_user(user_id)
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    user_dict = user.to_dict()
    user_dict["permissions"] = sorted(permission_service.get_user_permissions(user.id))
    return jsonify({"data": user_dict}), 200


@users_bp.put("/<int:user_id>")
@require_auth
@require_permission("user:update")
def update_user_route(user_id: int):
    """Body: any of {"email", "full_name", "role", "is_active"}"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        user = user_service.update_user(user_id, data)
        log_activity(
            g.current_user.id, "update_user",
            f"Updated fields: {', '.join(sorted(data.keys()))}", "users", user_id,
        )
        return jsonify({"data": user.to_dict(), "message": "User updated successfully"}), 200
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except UserValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.delete("/<int:user_id>")
@require_auth
@require_permission("user:delete")
def delete_user_route(user_id: int):
    try:
        user_service.delete_user(user_id, acting_user_id=g.current_user.id)
        log_activity(g.current_user.id, "delete_user", "Soft deleted user", "users", user_id)
        return jsonify({"message": "User deleted successfully"}), 200
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except UserValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return jsonify({"error": "Internal server error"}), 500
