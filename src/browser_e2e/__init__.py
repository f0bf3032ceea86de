"""
Browser E2E - Bootstrap for running browser end-to-end tests locally or on BrowserStack.

Configuration comes from environment variables:
    E2E_BROWSER_HOST     endpoint under test (defaults to production)
    USE_BROWSERSTACK     run on the BrowserStack grid instead of local browsers
    BROWSERSTACK_AUTH    "user:key" credentials, required with USE_BROWSERSTACK
    E2E_DEBUG            debug logging for the bootstrap

Installing the package registers the browser_e2e.plugin pytest plugin, which
records test reports for failure screenshots and provides the shared
BrowserStack Local tunnel.

Usage:
    # test_sign_in.py
    from browser_e2e import browser_test_suite

    @browser_test_suite("sign in")
    class SignInTests:
        @pytest.mark.asyncio
        async def test_loads(self):
            await self.inputs.driver.load_url(self.inputs.browser_host_url)
"""
from browser_e2e.config import (
    BrowserStackConfig,
    E2EConfig,
    get_config,
    load_config,
    reset_config,
    setup_logging,
)
from browser_e2e.core.errors import (
    BrowserE2EError,
    ConfigurationError,
    DriverSessionError,
    ElementTimeoutError,
    TunnelError,
)
from browser_e2e.core.models import TestEnvironment, TestInputs
from browser_e2e.driver import ExtendedWebDriver
from browser_e2e.environments import (
    BROWSERSTACK_ENVIRONMENTS,
    get_browserstack_environments,
    get_local_browser_environments,
    get_test_environments,
)
from browser_e2e.suites import (
    BrowserTestSuite,
    browser_test_suite,
    capture_failure_screenshot,
    create_test_suites,
    dispose_driver,
)
from browser_e2e.tunnel import LocalTunnel, TunnelManager

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "BrowserStackConfig",
    "E2EConfig",
    "get_config",
    "load_config",
    "reset_config",
    "setup_logging",
    # Environments
    "BROWSERSTACK_ENVIRONMENTS",
    "TestEnvironment",
    "get_browserstack_environments",
    "get_local_browser_environments",
    "get_test_environments",
    # Driver
    "ExtendedWebDriver",
    # Suites
    "BrowserTestSuite",
    "TestInputs",
    "browser_test_suite",
    "capture_failure_screenshot",
    "create_test_suites",
    "dispose_driver",
    # Tunnel
    "LocalTunnel",
    "TunnelManager",
    # Errors
    "BrowserE2EError",
    "ConfigurationError",
    "DriverSessionError",
    "ElementTimeoutError",
    "TunnelError",
    # Version
    "__version__",
]
