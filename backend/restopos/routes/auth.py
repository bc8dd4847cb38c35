# Overview: Flask API routes for auth operations; login/logout, current user and password changes.

"""
Authentication API routes

The session token is returned in the JSON body and set as the httpOnly
authToken cookie; the page guard and the API decorators read the cookie.
There is no self-registration: accounts are created by an admin through
/api/users or `flask users create`.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..services.activity_service import log_activity
from ..services.auth_service import AuthError, PasswordValidationError
from ..services.session_service import SESSION_ABSOLUTE_TIMEOUT
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _set_auth_cookie(response, token: str):
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=int(SESSION_ABSOLUTE_TIMEOUT.total_seconds()),
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite="Lax",
        path="/",
    )
    return response


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Body: {"email": "...", "password": "..."}
    Returns user info, permissions and the token; sets the authToken cookie.
    """
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400
        email = data.get("email")
        password = data.get("password")

        if not email or not password:
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            current_app.logger.info("Failed login for %s", email)
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr
        )
        permissions = sorted(permission_service.get_user_permissions(user.id))
        log_activity(user.id, "login", f"{user.email} signed in", "users", user.id)

        response = jsonify({
            "user": user.to_dict(),
            "permissions": permissions,
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful"
        })
        return _set_auth_cookie(response, token), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Revoke the current session and clear the cookie."""
    try:
        session_service.revoke_session(g.auth_token, reason="User logout")
        log_activity(g.current_user.id, "logout", f"{g.current_user.email} signed out", "users", g.current_user.id)

        response = jsonify({"message": "Logout successful"})
        response.delete_cookie(current_app.config["AUTH_COOKIE_NAME"], path="/")
        return response, 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user with permission codes (for hiding nav items and buttons)."""
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": sorted(permission_service.get_user_permissions(user.id)),
        "session": g.session_context.session.to_dict(),
    }), 200


@auth_bp.post("/password")
@require_auth
def change_password_route():
    """
    Change the current user's password.

    Body: {"current_password": "...", "new_password": "..."}
    Every other session of the user is revoked.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    current_password = data.get("current_password")
    new_password = data.get("new_password")
    if not current_password or not new_password:
        return jsonify({"error": "current_password and new_password required"}), 400

    try:
        auth_service.change_password(g.current_user, current_password, new_password)
        session_service.revoke_all_user_sessions(
            g.current_user.id,
            reason="Password changed",
            keep_session_id=g.session_context.session.id,
        )
        log_activity(g.current_user.id, "change_password", "Changed own password", "users", g.current_user.id)
        return jsonify({"message": "Password updated"}), 200
    except AuthError as e:
        return jsonify({"error": str(e)}), 400
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to change password")
        return jsonify({"error": "Internal server error"}), 500
