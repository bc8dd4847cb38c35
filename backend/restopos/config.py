# backend/restopos/config.py
from __future__ import annotations
import os


def _split_env(name: str, default: str) -> tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/restopos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # hosted Postgres in production
        "sqlite:///restopos.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Tax applied to new orders when the cashier does not send one
    DEFAULT_TAX_RATE = float(os.environ.get("DEFAULT_TAX_RATE", "0.15"))

    # Upper bound on guests per bill split
    MAX_SPLIT_COUNT = int(os.environ.get("MAX_SPLIT_COUNT", "20"))

    # Session cookie set on login and read by the page guard and API decorators
    AUTH_COOKIE_NAME = "authToken"
    AUTH_COOKIE_SECURE = os.environ.get("AUTH_COOKIE_SECURE", "false").lower() == "true"

    # Page guard
    PROTECTED_PAGE_PREFIXES = ("/admin", "/cashier", "/menu", "/tables", "/reports")
    AUTH_PAGE_PREFIXES = ("/auth/login", "/auth/signup")
    LOGIN_PAGE = "/auth/login"
    HOME_PAGE = "/admin"

    ALLOWED_ORIGINS = _split_env(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    )
