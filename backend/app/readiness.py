"""Readiness checks: config, packages, database, redis (when enabled), geocoder config."""
import asyncio
import logging
from urllib.parse import urlparse

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from app.infra.db.base import async_connect_args, normalize_async_url, url_without_sslmode

logger = logging.getLogger(__name__)

# Result: (passed: bool, message: str)
CheckResult = tuple[bool, str]
ChecksDict = dict[str, CheckResult]

REQUIRED_CHECKS = {"config", "packages", "database"}


def check_config() -> CheckResult:
    """Load settings and read the values startup depends on."""
    try:
        from app.settings import get_settings
        s = get_settings()
        _ = s.app_name
        _ = s.database_url
        if not s.secret_key:
            return False, "secret_key is empty"
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_packages() -> CheckResult:
    """Import critical modules: uvicorn, sqlalchemy, httpx, jose, redis, app.main."""
    missing = []
    for name in ("uvicorn", "sqlalchemy", "httpx", "jose", "redis"):
        try:
            __import__(name)
        except ImportError:
            missing.append(name)
    try:
        import app.main  # noqa: F401
    except ImportError as e:
        missing.append(f"app.main ({e})")
    if missing:
        return False, f"missing: {', '.join(missing)}"
    return True, "ok"


async def _check_database_async(database_url: str) -> CheckResult:
    """Run a trivial query against the database."""
    url = normalize_async_url(database_url)
    try:
        engine = create_async_engine(url_without_sslmode(url), connect_args=async_connect_args(url))
        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
        finally:
            await engine.dispose()
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_database() -> CheckResult:
    """Check database connectivity using settings.database_url."""
    try:
        from app.settings import get_settings
        return asyncio.run(_check_database_async(get_settings().database_url))
    except Exception as e:
        return False, str(e)


async def _check_redis_async() -> CheckResult:
    from app.settings import get_settings
    if not get_settings().redis_enabled:
        return True, "skipped (redis_enabled=false)"
    try:
        import redis.asyncio as redis_lib
        client = redis_lib.from_url(get_settings().redis_url)
        try:
            await client.ping()
        finally:
            await client.aclose()
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_redis() -> CheckResult:
    """Check Redis connectivity when event fan-out is enabled."""
    try:
        return asyncio.run(_check_redis_async())
    except Exception as e:
        return False, str(e)


def check_geocoder() -> CheckResult:
    """Geocoder base URL is a usable http(s) URL. No request is made."""
    try:
        from app.settings import get_settings
        parsed = urlparse(get_settings().geocoder_base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return False, f"invalid geocoder_base_url: {get_settings().geocoder_base_url!r}"
        return True, "ok"
    except Exception as e:
        return False, str(e)


def run_all_checks() -> ChecksDict:
    """Run all readiness checks (sync). Returns dict of check_name -> (passed, message)."""
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": check_database(),
        "redis": check_redis(),
        "geocoder": check_geocoder(),
    }


async def run_all_checks_async() -> ChecksDict:
    """Run all readiness checks (async). Use from async context (e.g. GET /ready) to avoid nested event loop."""
    from app.settings import get_settings
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": await _check_database_async(get_settings().database_url),
        "redis": await _check_redis_async(),
        "geocoder": check_geocoder(),
    }


def is_ready(checks: ChecksDict | None = None) -> tuple[bool, dict[str, str]]:
    """
    True if all required checks pass. Redis and geocoder are reported but optional.
    Returns (ready: bool, checks_summary: dict of name -> "ok" | "skipped ..." | error message).
    """
    if checks is None:
        checks = run_all_checks()
    summary: dict[str, str] = {name: msg for name, (passed, msg) in checks.items()}
    all_required = all(checks[n][0] for n in REQUIRED_CHECKS if n in checks)
    if not all_required:
        failed = [n for n in REQUIRED_CHECKS if n in checks and not checks[n][0]]
        logger.warning(f"⚠️ [READY] Not ready, failing checks: {', '.join(sorted(failed))}")
    return all_required, summary
