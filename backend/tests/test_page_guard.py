"""
Page guard tests: redirects for protected pages and the login page.
"""

import pytest


def _with_cookie(client):
    client.set_cookie("authToken", "some-token")
    return client


class TestProtectedPages:
    @pytest.mark.parametrize("path", ["/admin", "/cashier", "/menu/3", "/tables", "/reports/daily"])
    def test_redirects_to_login_without_cookie(self, client, db_session, path):
        resp = client.get(path)
        assert resp.status_code == 302
        assert "/auth/login?redirect=" in resp.headers["Location"]

    def test_redirect_keeps_the_requested_path(self, client, db_session):
        resp = client.get("/admin/bills")
        assert resp.headers["Location"].endswith("/auth/login?redirect=%2Fadmin%2Fbills")

    @pytest.mark.parametrize("path", ["/administrator", "/tablesfoo", "/menus"])
    def test_prefix_must_end_on_a_path_segment(self, client, db_session, path):
        assert client.get(path).status_code == 404

    def test_cookie_lets_the_request_through(self, client, db_session):
        # No page is registered, so passing the guard ends in a 404
        resp = _with_cookie(client).get("/admin/bills")
        assert resp.status_code == 404


class TestAuthPages:
    @pytest.mark.parametrize("path", ["/auth/login", "/auth/signup"])
    def test_signed_in_user_is_sent_home(self, client, db_session, path):
        resp = _with_cookie(client).get(path)
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/admin")

    def test_login_page_without_cookie_is_not_redirected(self, client, db_session):
        assert client.get("/auth/login").status_code == 404


class TestApiIsNeverRedirected:
    def test_api_answers_401(self, client, db_session):
        resp = client.get("/api/tables")
        assert resp.status_code == 401

    def test_public_paths_pass(self, client, db_session):
        assert client.get("/").status_code == 404
