"""Database base configuration."""
import os
import ssl
from urllib.parse import parse_qs, urlparse

from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase


def normalize_async_url(url: str) -> str:
    """Ensure the URL uses an async driver; hosted Postgres often hands out postgresql:// (sync)."""
    u = (url or "").strip()
    if u.startswith("postgres://"):
        return u.replace("postgres://", "postgresql+asyncpg://", 1)
    if u.startswith("postgresql://"):
        return u.replace("postgresql://", "postgresql+asyncpg://", 1)
    if u.startswith("sqlite://") and not u.startswith("sqlite+aiosqlite://"):
        return u.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return u


def _ssl_context_no_verify() -> ssl.SSLContext:
    """SSL context that skips certificate verification."""
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def async_connect_args(url: str) -> dict:
    """connect_args for the async driver.

    asyncpg does not accept sslmode, so sslmode=require becomes an ssl argument.
    Certificates are not verified unless DATABASE_SSL_VERIFY=true.
    SQLite needs check_same_thread=False under aiosqlite.
    """
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    qs = parse_qs(urlparse(url).query, keep_blank_values=True)
    if qs.get("sslmode") != ["require"]:
        return {}
    verify = os.environ.get("DATABASE_SSL_VERIFY", "false").strip().lower()
    if verify in ("true", "1"):
        return {"ssl": True}
    return {"ssl": _ssl_context_no_verify()}


def url_without_sslmode(url: str) -> str:
    """Drop sslmode and channel_binding query params the async driver would reject."""
    return (
        make_url(url)
        .difference_update_query(["sslmode", "channel_binding"])
        .render_as_string(hide_password=False)
    )


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# Models are imported in app/main.py and alembic/env.py, not here:
# base.py -> models/__init__.py -> user.py -> base.py would be circular.
