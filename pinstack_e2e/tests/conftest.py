"""
Pytest configuration for the harness test suite.

Defines markers, command-line options and the settings fixture shared by the
meta-tests (no gateway needed) and the gateway scenarios under ``e2e/``.
"""

import pytest

from pinstack_e2e.core.config import Settings

pytest_markers = [
    "e2e: marks scenarios that drive a running gateway",
    "slow: marks tests that take a long time to run (>30s)",
    "critical: marks tests that are critical for basic functionality",
    "eventual: marks tests that wait for asynchronous side effects",
    "timeout: marks tests with explicit timeout limits (requires pytest-timeout plugin)",
]


def pytest_configure(config):
    """Register custom markers."""
    for marker in pytest_markers:
        config.addinivalue_line("markers", marker)


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--skip-slow",
        action="store_true",
        default=False,
        help="Skip slow-running tests"
    )
    parser.addoption(
        "--critical-only",
        action="store_true",
        default=False,
        help="Run only critical tests"
    )
    parser.addoption(
        "--gateway-url",
        action="store",
        default=None,
        help="Override api.base_url for gateway scenarios"
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow or non-critical tests when requested."""
    skip_slow = config.getoption("--skip-slow", default=False)
    run_critical_only = config.getoption("--critical-only", default=False)

    for item in items:
        if skip_slow and "slow" in item.keywords:
            item.add_marker(pytest.mark.skip(
                reason="Slow test skipped (--skip-slow)"
            ))
        if run_critical_only and "critical" not in item.keywords:
            item.add_marker(pytest.mark.skip(
                reason="Non-critical test skipped (--critical-only mode)"
            ))


@pytest.fixture()
def unit_settings():
    """Defaults only: no YAML, no .env, fast polling."""
    return Settings(
        _env_file=None,
        outbox={"poll_interval": "10ms"},
        test={"eventual_timeout": "1s"},
    )
