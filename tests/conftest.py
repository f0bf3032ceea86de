"""
Pytest configuration and shared fixtures.
"""
from unittest.mock import MagicMock

import pytest

from browser_e2e import config as config_module
from browser_e2e.driver import ExtendedWebDriver

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def reset_process_config():
    """Keep the cached process-wide config from leaking between tests."""
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def raw_driver():
    """A MagicMock standing in for a selenium WebDriver."""
    driver = MagicMock(name="WebDriver")
    driver.save_screenshot.return_value = True
    driver.current_url = "https://example.com/"
    driver.title = "Example Domain"
    return driver


@pytest.fixture
def extended_driver(raw_driver):
    return ExtendedWebDriver(raw_driver)
