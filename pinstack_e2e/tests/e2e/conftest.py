"""
Pytest configuration for gateway scenarios.

Every scenario here drives a running gateway. Settings are loaded once per
session (``PINSTACK_CONFIG_FILE`` or the packaged YAML, environment overrides,
``--gateway-url``), the whole directory is skipped when the gateway does not
answer, and each test gets its own ``TestContext`` whose tracked entities are
deleted at teardown.
"""

import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from pinstack_e2e.core.config import Settings, load_settings
from pinstack_e2e.core.http_client import GatewayClient
from pinstack_e2e.core.Logging.log_setup import configure_logging, log_context
from pinstack_e2e.core.Tracking.context import TestContext

SERVER_STARTUP_TIMEOUT = 10

_settings_key = pytest.StashKey[Settings]()


def _run_settings(config) -> Settings:
    """Load settings once per session and apply ``--gateway-url``."""
    if _settings_key not in config.stash:
        settings = load_settings()
        gateway_url = config.getoption("--gateway-url", default=None)
        if gateway_url:
            settings = settings.model_copy(
                update={"api": settings.api.model_copy(update={"base_url": gateway_url.rstrip("/")})}
            )
        config.stash[_settings_key] = settings
    return config.stash[_settings_key]


def pytest_collection_modifyitems(config, items):
    """Bound every gateway scenario by ``test.test_timeout`` unless it sets its own."""
    e2e_items = [item for item in items if "e2e" in item.keywords]
    if not e2e_items:
        return
    timeout = _run_settings(config).test.test_timeout.total_seconds()
    for item in e2e_items:
        if item.get_closest_marker("timeout") is None:
            item.add_marker(pytest.mark.timeout(timeout))


@pytest.fixture(scope="session")
def settings(pytestconfig) -> Settings:
    return _run_settings(pytestconfig)


@pytest.fixture(scope="session")
def e2e_log(settings):
    return configure_logging(settings)


@pytest.fixture(scope="session", autouse=True)
def ensure_gateway_running(settings, e2e_log):
    """
    Skip the gateway scenarios when nothing answers at ``api.base_url``.

    Retries for a few seconds so a gateway that is still starting up is not
    reported as missing.
    """
    deadline = time.monotonic() + SERVER_STARTUP_TIMEOUT
    with GatewayClient.from_settings(settings, e2e_log) as probe:
        while True:
            if probe.health():
                e2e_log.info(f"Gateway is reachable at {settings.api.base_url}")
                return
            if time.monotonic() >= deadline:
                break
            time.sleep(1)
    pytest.skip(f"Gateway not available at {settings.api.base_url}")


@pytest.fixture()
def tc(settings, e2e_log, request):
    """Fresh TestContext per scenario; tracked entities are removed afterwards."""
    with log_context(scenario=request.node.name) as log:
        with TestContext(settings, log) as ctx:
            yield ctx


@pytest.fixture()
def pool(settings):
    """Worker threads for sub-cases that share one TestContext."""
    with ThreadPoolExecutor(max_workers=settings.test.concurrent) as executor:
        yield executor
