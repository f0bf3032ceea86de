"""
Configuration - Runtime settings derived from environment variables.

The config is resolved synchronously because pytest collects the generated
suites at import time, and the set of suites depends on these values.
"""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import List, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

from browser_e2e.core.errors import ConfigurationError

logger = logging.getLogger("browser_e2e")

E2E_BROWSER_HOST = "E2E_BROWSER_HOST"
USE_BROWSERSTACK = "USE_BROWSERSTACK"
BROWSERSTACK_AUTH = "BROWSERSTACK_AUTH"
BROWSERSTACK_LOCAL_IDENTIFIER = "BROWSERSTACK_LOCAL_IDENTIFIER"
BROWSERSTACK_BUILD_NAME = "BROWSERSTACK_BUILD_NAME"
E2E_SCREENSHOT_DIR = "E2E_SCREENSHOT_DIR"
E2E_HEADLESS = "E2E_HEADLESS"
E2E_BROWSERS = "E2E_BROWSERS"
E2E_DEBUG = "E2E_DEBUG"
E2E_BROWSERSTACK_ENVIRONMENTS = "E2E_BROWSERSTACK_ENVIRONMENTS"
BROWSERSTACK_LOCAL_BINARY = "BROWSERSTACK_LOCAL_BINARY"

PROD_HOST = "https://browser.blockstack.org"
BROWSERSTACK_HUB_URL = "https://hub-cloud.browserstack.com/wd/hub"

LOCAL_HOSTNAMES = ("localhost", "127.0.0.1")
# BrowserStack Safari only proxies a fixed list of localhost ports.
# See https://www.browserstack.com/question/664
EXPECTED_LOCAL_PORT = 5757
# Safari on BrowserStack cannot reach "localhost"; bs-local.com resolves to the tunnel.
# See https://www.browserstack.com/question/759
BROWSERSTACK_LOCAL_HOSTNAME = "bs-local.com"


def _default_screenshot_dir() -> str:
    return os.path.join(tempfile.gettempdir(), "selenium-errors")


@dataclass
class BrowserStackConfig:
    """BrowserStack grid and BrowserStack Local settings."""

    enabled: bool = False
    user: str = ""
    key: str = ""
    local_enabled: bool = False
    hub_url: str = BROWSERSTACK_HUB_URL
    local_identifier: Optional[str] = None
    build_name: Optional[str] = None
    environments_file: Optional[str] = None
    local_binary_path: Optional[str] = None


@dataclass
class E2EConfig:
    """Configuration for an e2e test run."""

    browser_host_url: str = PROD_HOST
    browserstack: BrowserStackConfig = field(default_factory=BrowserStackConfig)
    implicit_wait: float = 1.0
    page_load_timeout: float = 10.0
    setup_timeout: float = 120.0
    screenshot_dir: str = field(default_factory=_default_screenshot_dir)
    headless: bool = False
    browsers: List[str] = field(default_factory=list)
    debug: bool = False


def _is_flag_set(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() != "false"


def _parse_auth(auth: Optional[str]) -> tuple:
    if auth:
        user, _, key = auth.strip().partition(":")
        if user and key:
            return user, key
    message = (
        f"The BrowserStack auth must be set as environment variables. "
        f'Use the format `{BROWSERSTACK_AUTH}="user:key"`'
    )
    logger.error(message)
    raise ConfigurationError(message, method="load_config")


def debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether E2E_DEBUG asks for debug logging."""
    env = os.environ if environ is None else environ
    return _is_flag_set(env.get(E2E_DEBUG))


def _swap_hostname(url: str, hostname: str) -> str:
    parts = urlsplit(url)
    userinfo, at, _ = parts.netloc.rpartition("@")
    netloc = hostname if parts.port is None else f"{hostname}:{parts.port}"
    netloc = f"{userinfo}{at}{netloc}"
    return urlunsplit(parts._replace(netloc=netloc))


def load_config(environ: Optional[Mapping[str, str]] = None) -> E2EConfig:
    """
    Build an E2EConfig from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        The resolved configuration.

    Raises:
        ConfigurationError: BrowserStack is enabled without usable credentials.
    """
    env = os.environ if environ is None else environ
    config = E2EConfig()

    # Determine which browser host endpoint to run tests against.
    host = env.get(E2E_BROWSER_HOST)
    if host:
        config.browser_host_url = host
        logger.info(f"Running e2e tests against endpoint {host}")
    else:
        logger.warning(
            f"The browser host url was not set via the {E2E_BROWSER_HOST} env var, "
            f'running tests against the production endpoint "{PROD_HOST}"'
        )

    bs = config.browserstack
    bs.enabled = _is_flag_set(env.get(USE_BROWSERSTACK))
    if bs.enabled:
        bs.user, bs.key = _parse_auth(env.get(BROWSERSTACK_AUTH))
        bs.local_identifier = env.get(BROWSERSTACK_LOCAL_IDENTIFIER) or None
        bs.build_name = env.get(BROWSERSTACK_BUILD_NAME) or None
        bs.environments_file = env.get(E2E_BROWSERSTACK_ENVIRONMENTS) or None
        bs.local_binary_path = env.get(BROWSERSTACK_LOCAL_BINARY) or None

        parsed = urlsplit(config.browser_host_url)
        bs.local_enabled = parsed.hostname in LOCAL_HOSTNAMES
        if bs.local_enabled and parsed.port != EXPECTED_LOCAL_PORT:
            logger.warning(
                f"BrowserStack Local is enabled but the host port is {parsed.port} rather than "
                f"the expected port {EXPECTED_LOCAL_PORT}. This may cause problems for "
                f"BrowserStack Safari environments, see https://www.browserstack.com/question/664"
            )

    if bs.local_enabled:
        config.browser_host_url = _swap_hostname(config.browser_host_url, BROWSERSTACK_LOCAL_HOSTNAME)
        logger.info(f"Using BrowserStack Local host {config.browser_host_url}")

    if env.get(E2E_SCREENSHOT_DIR):
        config.screenshot_dir = env[E2E_SCREENSHOT_DIR]
    config.headless = _is_flag_set(env.get(E2E_HEADLESS))
    config.browsers = [
        name.strip().lower() for name in env.get(E2E_BROWSERS, "").split(",") if name.strip()
    ]
    config.debug = debug_enabled(env)

    return config


_config: Optional[E2EConfig] = None


def get_config() -> E2EConfig:
    """Get the process-wide config, loading it from os.environ on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the process-wide config so the next get_config() reloads it."""
    global _config
    _config = None


def setup_logging(level: int = logging.INFO, debug: bool = False):
    """Configure logging for the e2e bootstrap."""
    if debug:
        level = logging.DEBUG

    logger.setLevel(level)
    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)
