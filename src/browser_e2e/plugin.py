"""
pytest plugin for browser e2e suites.

Installed as a `pytest11` entry point, so pytest loads it automatically once
browser-e2e is installed. Disable it with `-p no:browser_e2e.plugin`.
"""
import logging

import pytest

from browser_e2e.config import E2EConfig, debug_enabled, get_config
from browser_e2e.suites import run_sync
from browser_e2e.tunnel import TunnelManager

logger = logging.getLogger("browser_e2e")


def pytest_configure(config):
    """Register the markers used by generated suites and honor E2E_DEBUG."""
    config.addinivalue_line(
        "markers", "e2e: browser end-to-end suite (requires a browser or BrowserStack)"
    )
    # pytest owns the log handlers; only the level is ours to set
    if debug_enabled():
        logger.setLevel(logging.DEBUG)


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report as item.rep_setup / rep_call / rep_teardown."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture(scope="session")
def e2e_config() -> E2EConfig:
    """The process-wide e2e configuration."""
    return get_config()


@pytest.fixture(scope="session")
def local_tunnel():
    """Shared BrowserStack Local tunnel, stopped once every suite has finished."""
    manager = TunnelManager()
    yield manager
    run_sync(manager.stop())
