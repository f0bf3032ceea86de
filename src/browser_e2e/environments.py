"""
Test Environments - Enumerates the browsers a suite should run against.

Two sources: the BrowserStack cloud grid, and the browsers installed on the
local machine. Each environment carries a factory that opens a WebDriver
session on demand and returns it wrapped in an ExtendedWebDriver.
"""
from __future__ import annotations

import asyncio
import copy
import json
import logging
import sys
from typing import Any, Dict, Iterable, Iterator, List, Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver import ChromeOptions, EdgeOptions, FirefoxOptions, SafariOptions
from selenium.webdriver.common.options import ArgOptions

from browser_e2e.config import E2EConfig
from browser_e2e.core.errors import ConfigurationError, DriverSessionError
from browser_e2e.core.models import TestEnvironment
from browser_e2e.driver import ExtendedWebDriver

logger = logging.getLogger("browser_e2e")

# W3C capabilities, see https://www.browserstack.com/automate/capabilities
BROWSERSTACK_ENVIRONMENTS: List[Dict[str, Any]] = [
    {
        "desc": "Windows 11 Chrome",
        "browserName": "Chrome",
        "browserVersion": "latest",
        "bstack:options": {"os": "Windows", "osVersion": "11"},
    },
    {
        "desc": "Windows 11 Firefox",
        "browserName": "Firefox",
        "browserVersion": "latest",
        "bstack:options": {"os": "Windows", "osVersion": "11"},
    },
    {
        "desc": "Windows 11 Edge",
        "browserName": "Edge",
        "browserVersion": "latest",
        "bstack:options": {"os": "Windows", "osVersion": "11"},
    },
    {
        "desc": "macOS Sonoma Safari",
        "browserName": "Safari",
        "browserVersion": "17",
        "bstack:options": {"os": "OS X", "osVersion": "Sonoma"},
    },
    {
        "desc": "macOS Sonoma Chrome",
        "browserName": "Chrome",
        "browserVersion": "latest",
        "bstack:options": {"os": "OS X", "osVersion": "Sonoma"},
    },
]

_OPTIONS_BY_BROWSER = {
    "chrome": ChromeOptions,
    "firefox": FirefoxOptions,
    "safari": SafariOptions,
    "edge": EdgeOptions,
    "microsoftedge": EdgeOptions,
}

_LOCAL_DRIVERS = {
    "chrome": "Chrome",
    "firefox": "Firefox",
    "safari": "Safari",
    "edge": "Edge",
}

_HEADLESS_ARGS = {
    "chrome": "--headless=new",
    "edge": "--headless=new",
    "firefox": "-headless",
}


def load_browserstack_environments(path: str) -> List[Dict[str, Any]]:
    """
    Load a list of capability dicts from a JSON file.

    Every entry needs a "desc" and a "browserName".
    """
    with open(path, encoding="utf-8") as f:
        environments = json.load(f)
    if not isinstance(environments, list):
        raise ConfigurationError(
            f"{path} must contain a JSON list of capability objects",
            method="load_browserstack_environments",
        )
    for entry in environments:
        if not isinstance(entry, dict) or "desc" not in entry or "browserName" not in entry:
            raise ConfigurationError(
                f"Every environment in {path} needs a 'desc' and a 'browserName'",
                method="load_browserstack_environments",
                entry=entry,
            )
    return environments


def _default_capabilities(config: E2EConfig) -> List[Dict[str, Any]]:
    path = config.browserstack.environments_file
    if path:
        logger.info(f"Loading BrowserStack environments from {path}")
        return load_browserstack_environments(path)
    return BROWSERSTACK_ENVIRONMENTS


def build_remote_options(capabilities: Dict[str, Any]) -> ArgOptions:
    """
    Turn a capability dict into the Selenium options object for its browser.

    Every key except "desc" is copied verbatim as a capability.
    """
    browser = str(capabilities.get("browserName", "chrome")).lower()
    options_cls = _OPTIONS_BY_BROWSER.get(browser)
    if options_cls is None:
        raise ConfigurationError(
            f"Unsupported browserName {capabilities.get('browserName')!r}",
            method="build_remote_options",
        )
    options = options_cls()
    for name, value in capabilities.items():
        if name == "desc":
            continue
        options.set_capability(name, value)
    return options


async def _wrap_and_configure(driver, config: E2EConfig, description: str) -> ExtendedWebDriver:
    extended = ExtendedWebDriver(driver)
    try:
        await extended.configure_timeouts(
            implicit_wait=config.implicit_wait,
            page_load_timeout=config.page_load_timeout,
        )
    except DriverSessionError as e:
        e.environment = description
        try:
            await asyncio.to_thread(driver.quit)
        except WebDriverException as quit_error:
            logger.warning(f"Error disposing driver after failed setup: {quit_error}")
        raise
    return extended


async def create_remote_driver(
    hub_url: str,
    capabilities: Dict[str, Any],
    config: E2EConfig,
) -> ExtendedWebDriver:
    """Open a session on a remote grid and apply the configured timeouts."""
    description = capabilities.get("desc", capabilities.get("browserName", "remote"))
    options = build_remote_options(capabilities)
    logger.info(f"Creating remote WebDriver session for {description}")
    try:
        driver = await asyncio.to_thread(webdriver.Remote, command_executor=hub_url, options=options)
    except WebDriverException as e:
        raise DriverSessionError(
            f"Could not create remote session: {e.msg or e}",
            environment=description,
            method="create_remote_driver",
        ) from e
    return await _wrap_and_configure(driver, config, description)


def _local_options(browser: str, config: E2EConfig) -> ArgOptions:
    options = _OPTIONS_BY_BROWSER[browser]()
    if config.headless:
        arg = _HEADLESS_ARGS.get(browser)
        if arg:
            options.add_argument(arg)
        else:
            logger.warning(f"{browser} does not support headless mode, starting a visible window")
    return options


async def create_local_driver(browser: str, config: E2EConfig) -> ExtendedWebDriver:
    """Launch a locally installed browser; Selenium Manager resolves the driver binary."""
    driver_cls = getattr(webdriver, _LOCAL_DRIVERS[browser])
    options = _local_options(browser, config)
    logger.info(f"Creating local WebDriver session for {browser}")
    try:
        driver = await asyncio.to_thread(driver_cls, options=options)
    except WebDriverException as e:
        raise DriverSessionError(
            f"Could not start local {browser}: {e.msg or e}",
            environment=browser,
            method="create_local_driver",
        ) from e
    return await _wrap_and_configure(driver, config, browser)


def get_browserstack_environments(
    config: E2EConfig,
    capabilities: Optional[Iterable[Dict[str, Any]]] = None,
) -> Iterator[TestEnvironment]:
    """
    Yield one environment per BrowserStack capability set.

    Args:
        config: Resolved config; supplies credentials and the local flag.
        capabilities: Capability dicts to use instead of the defaults.
    """
    bs = config.browserstack
    for entry in (_default_capabilities(config) if capabilities is None else capabilities):
        capability = copy.deepcopy(entry)
        bstack_options = capability.setdefault("bstack:options", {})
        bstack_options["userName"] = bs.user
        bstack_options["accessKey"] = bs.key
        if bs.local_enabled:
            bstack_options["local"] = "true"
            if bs.local_identifier:
                bstack_options["localIdentifier"] = bs.local_identifier
        if bs.build_name:
            bstack_options["buildName"] = bs.build_name

        async def create_driver(capability=capability):
            return await create_remote_driver(bs.hub_url, capability, config)

        yield TestEnvironment(
            description=capability["desc"],
            create_driver=create_driver,
            browser_name=capability.get("browserName"),
            capabilities=capability,
        )


def get_local_browser_environments(
    config: E2EConfig,
    platform: Optional[str] = None,
) -> Iterator[TestEnvironment]:
    """
    Yield environments for the local machine.

    Always includes firefox and chrome, plus safari on macOS and edge on
    Windows. E2E_BROWSERS narrows the list.
    """
    platform = platform or sys.platform
    browsers = ["firefox", "chrome"]
    if platform == "darwin":
        browsers.append("safari")
    elif platform == "win32":
        browsers.append("edge")

    for browser in dict.fromkeys(browsers):
        if config.browsers and browser not in config.browsers:
            continue

        async def create_driver(browser=browser):
            return await create_local_driver(browser, config)

        yield TestEnvironment(
            description=f"{platform} {browser}",
            create_driver=create_driver,
            browser_name=browser,
        )


def get_test_environments(config: E2EConfig) -> Iterator[TestEnvironment]:
    """Cloud grid environments when BrowserStack is enabled, local ones otherwise."""
    if config.browserstack.enabled:
        return get_browserstack_environments(config)
    return get_local_browser_environments(config)
