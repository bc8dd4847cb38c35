"""
Login, logout, session and password tests.
"""

from datetime import timedelta

import pytest

from restopos.models import SessionToken
from restopos.services import session_service
from restopos.services.auth_service import (
    PasswordValidationError,
    validate_password_strength,
    verify_password,
)
from restopos.time_utils import utcnow

from .conftest import PASSWORD, auth_headers, get_auth_token


def _login(client, email, password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


class TestLogin:
    def test_login_sets_cookie_and_returns_permissions(self, client, cashier_user):
        resp = _login(client, cashier_user.email)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user"]["email"] == cashier_user.email
        assert "orders:create" in body["permissions"]
        assert "user:read" not in body["permissions"]
        assert body["token"]

        cookie = next(c for c in resp.headers.getlist("Set-Cookie") if c.startswith("authToken="))
        assert "HttpOnly" in cookie
        assert "SameSite=Lax" in cookie

    def test_email_is_case_insensitive(self, client, cashier_user):
        assert _login(client, "  CASHIER@RestoPOS.test ").status_code == 200

    def test_wrong_password(self, client, cashier_user):
        resp = _login(client, cashier_user.email, "WrongPassword1!")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_unknown_user(self, client, db_session):
        assert _login(client, "nobody@restopos.test").status_code == 401

    def test_inactive_user(self, client, db_session, cashier_user):
        cashier_user.is_active = False
        db_session.commit()
        assert _login(client, cashier_user.email).status_code == 401

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "a@b.c"})
        assert resp.status_code == 400

    def test_login_stamps_last_login(self, client, db_session, cashier_user):
        _login(client, cashier_user.email)
        db_session.refresh(cashier_user)
        assert cashier_user.last_login_at is not None


class TestSessionCookie:
    def test_cookie_authenticates_follow_up_requests(self, client, cashier_user):
        _login(client, cashier_user.email)

        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.get_json()["user"]["role"] == "cashier"

    def test_logout_revokes_session_and_clears_cookie(self, client, cashier_user):
        token = _login(client, cashier_user.email).get_json()["token"]

        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        cookie = next(c for c in resp.headers.getlist("Set-Cookie") if c.startswith("authToken="))
        assert "Max-Age=0" in cookie or "expires=Thu, 01 Jan 1970" in cookie

        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_bearer_header_fallback(self, app, client, cashier_user):
        token = get_auth_token(app, cashier_user.email)
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 200


class TestSessionExpiry:
    def test_idle_session_is_revoked(self, app, client, db_session, cashier_user):
        token = get_auth_token(app, cashier_user.email)
        session = db_session.query(SessionToken).filter_by(user_id=cashier_user.id).one()
        session.last_used_at = utcnow() - timedelta(hours=3)
        db_session.commit()

        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401
        db_session.refresh(session)
        assert session.is_revoked is True
        assert session.revoked_reason == "Idle timeout"

    def test_expired_session(self, app, client, db_session, cashier_user):
        token = get_auth_token(app, cashier_user.email)
        session = db_session.query(SessionToken).filter_by(user_id=cashier_user.id).one()
        session.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_deactivated_user_loses_session(self, app, client, db_session, cashier_user):
        token = get_auth_token(app, cashier_user.email)
        cashier_user.is_active = False
        db_session.commit()

        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_only_hash_is_stored(self, db_session, cashier_user):
        session, token = session_service.create_session(cashier_user.id)
        assert session.token_hash != token
        assert session.token_hash == session_service.hash_token(token)

    def test_cleanup_removes_old_revoked_sessions(self, db_session, cashier_user):
        session, token = session_service.create_session(cashier_user.id)
        session_service.revoke_session(token)
        session.created_at = utcnow() - timedelta(days=31)
        db_session.commit()

        assert session_service.cleanup_expired_sessions() == 1
        assert db_session.query(SessionToken).count() == 0


class TestPasswordChange:
    def test_change_revokes_other_sessions(self, app, client, db_session, cashier_user):
        other_token = get_auth_token(app, cashier_user.email)
        token = get_auth_token(app, cashier_user.email)

        resp = client.post(
            "/api/auth/password",
            json={"current_password": PASSWORD, "new_password": "NewPassword456!"},
            headers=auth_headers(token),
        )

        assert resp.status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers(other_token)).status_code == 401
        assert get_auth_token(app, cashier_user.email, "NewPassword456!") is not None

    def test_wrong_current_password(self, app, client, cashier_user):
        token = get_auth_token(app, cashier_user.email)
        resp = client.post(
            "/api/auth/password",
            json={"current_password": "Nope12345!", "new_password": "NewPassword456!"},
            headers=auth_headers(token),
        )
        assert resp.status_code == 400

    def test_weak_new_password(self, app, client, cashier_user):
        token = get_auth_token(app, cashier_user.email)
        resp = client.post(
            "/api/auth/password",
            json={"current_password": PASSWORD, "new_password": "short"},
            headers=auth_headers(token),
        )
        assert resp.status_code == 400


class TestPasswordRules:
    @pytest.mark.parametrize("password", [
        "Sh0rt!",
        "alllowercase1!",
        "ALLUPPERCASE1!",
        "NoDigitsHere!",
        "NoSpecials123",
    ])
    def test_rejects_weak(self, password):
        with pytest.raises(PasswordValidationError):
            validate_password_strength(password)

    def test_accepts_strong(self):
        validate_password_strength(PASSWORD)

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password(PASSWORD, "not-a-bcrypt-hash") is False
