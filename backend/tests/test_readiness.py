"""Readiness checks. Config and packages must pass; the database check uses the in-memory test database."""
import pytest

from app.readiness import REQUIRED_CHECKS, _check_redis_async, check_config, check_geocoder, is_ready, run_all_checks


def test_config_and_geocoder_checks_pass():
    assert check_config() == (True, "ok")
    assert check_geocoder() == (True, "ok")


def test_invalid_geocoder_url_fails(override_settings):
    override_settings(geocoder_base_url="not a url")

    ok, message = check_geocoder()

    assert not ok
    assert "geocoder_base_url" in message


@pytest.mark.asyncio
async def test_redis_check_skipped_when_disabled():
    ok, message = await _check_redis_async()
    assert ok
    assert message.startswith("skipped")


def test_optional_failures_do_not_block_readiness():
    checks = {name: (True, "ok") for name in REQUIRED_CHECKS}
    checks["redis"] = (False, "connection refused")

    ready, summary = is_ready(checks)

    assert ready
    assert summary["redis"] == "connection refused"


def test_required_failure_blocks_readiness():
    checks = {name: (True, "ok") for name in REQUIRED_CHECKS}
    checks["database"] = (False, "down")

    ready, _ = is_ready(checks)

    assert not ready


@pytest.mark.integration
def test_readiness_all_checks_pass():
    """Runs every check against the configured services."""
    checks = run_all_checks()
    for name in ("config", "packages"):
        ok, msg = checks.get(name, (False, "missing"))
        assert ok, f"readiness {name}: {msg}"
    ready, summary = is_ready(checks)
    if not ready:
        report = "\n".join(f"  {name}: {msg}" for name, msg in summary.items())
        pytest.fail(f"Readiness checks failed:\n{report}")
