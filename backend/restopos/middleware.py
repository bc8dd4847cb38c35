# Overview: Page guard run before every request; redirects page paths based on the authToken cookie.

"""
Page guard

- A protected page (/admin, /cashier, /menu, /tables, /reports) requested
  without the authToken cookie redirects to /auth/login?redirect=<path>.
- A login/signup page requested with the cookie redirects to /admin.
- /api/* is never redirected; the API answers 401/403 itself.

Only the presence of the cookie is checked here. Whether the token is still
valid is decided by the API on the next data request.
"""

from urllib.parse import urlencode

from flask import Flask, current_app, redirect, request


def _matches(path: str, prefixes) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") for prefix in prefixes)


def page_guard():
    path = request.path
    if path == "/api" or path.startswith("/api/"):
        return None

    config = current_app.config
    has_token = bool(request.cookies.get(config["AUTH_COOKIE_NAME"]))

    if _matches(path, config["PROTECTED_PAGE_PREFIXES"]) and not has_token:
        return redirect(f"{config['LOGIN_PAGE']}?{urlencode({'redirect': path})}")

    if _matches(path, config["AUTH_PAGE_PREFIXES"]) and has_token:
        return redirect(config["HOME_PAGE"])

    return None


def register_page_guard(app: Flask) -> None:
    app.before_request(page_guard)
