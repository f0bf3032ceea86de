"""
ExtendedWebDriver - Async convenience layer over a Selenium WebDriver session.

Selenium calls block, so every call is pushed onto a worker thread with
asyncio.to_thread. Anything not wrapped here is delegated to the raw driver.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from browser_e2e.core.errors import DriverSessionError, ElementTimeoutError

logger = logging.getLogger("browser_e2e")

DEFAULT_ELEMENT_TIMEOUT = 10.0


class ExtendedWebDriver:
    """
    Wraps a Selenium WebDriver with async helpers used by e2e tests.

    Usage:
        async with ExtendedWebDriver(webdriver.Firefox()) as driver:
            await driver.load_url("https://example.com")
            await driver.click("#login")
            await driver.set_text("input[name=user]", "alice")
    """

    def __init__(self, driver: WebDriver):
        self._driver = driver

    async def __aenter__(self) -> ExtendedWebDriver:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.quit()

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes not defined on the wrapper.
        return getattr(self._driver, name)

    @property
    def driver(self) -> WebDriver:
        """The underlying Selenium WebDriver."""
        return self._driver

    async def _call(self, method: str, func, *args, **kwargs):
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except TimeoutException as e:
            raise ElementTimeoutError(str(e.msg or e), method=method) from e
        except WebDriverException as e:
            raise DriverSessionError(str(e.msg or e), method=method) from e

    # =========================================================================
    # Session
    # =========================================================================

    async def configure_timeouts(self, *, implicit_wait: float, page_load_timeout: float) -> None:
        """Set the implicit element wait and page load timeout (seconds)."""
        def apply():
            self._driver.implicitly_wait(implicit_wait)
            self._driver.set_page_load_timeout(page_load_timeout)
        await self._call("configure_timeouts", apply)

    async def quit(self) -> None:
        """End the WebDriver session."""
        await self._call("quit", self._driver.quit)
        logger.debug("WebDriver session quit")

    # =========================================================================
    # Navigation
    # =========================================================================

    async def load_url(self, url: str) -> None:
        """Navigate to a URL and wait for the page load."""
        await self._call("load_url", self._driver.get, url)

    async def get_url(self) -> str:
        return await self._call("get_url", lambda: self._driver.current_url)

    async def get_title(self) -> str:
        return await self._call("get_title", lambda: self._driver.title)

    async def execute_script(self, script: str, *args: Any) -> Any:
        return await self._call("execute_script", self._driver.execute_script, script, *args)

    # =========================================================================
    # Elements
    # =========================================================================

    async def wait_for_element(
        self,
        selector: str,
        *,
        timeout: float = DEFAULT_ELEMENT_TIMEOUT,
        visible: bool = False,
        by: str = By.CSS_SELECTOR,
    ) -> WebElement:
        """
        Wait until an element is present (or visible) and return it.

        Args:
            selector: Locator value, a CSS selector by default.
            timeout: Seconds to wait before giving up.
            visible: If True, also wait for the element to be displayed.
            by: Selenium locator strategy.

        Raises:
            ElementTimeoutError: The element did not show up in time.
        """
        condition = EC.visibility_of_element_located if visible else EC.presence_of_element_located

        def wait():
            return WebDriverWait(self._driver, timeout).until(condition((by, selector)))

        try:
            return await self._call("wait_for_element", wait)
        except ElementTimeoutError as e:
            raise ElementTimeoutError(
                f"Timed out after {timeout}s waiting for element {selector!r}",
                timeout=timeout,
                method="wait_for_element",
            ) from e

    async def find(self, selector: str, *, by: str = By.CSS_SELECTOR) -> WebElement:
        """Find an element, relying on the session's implicit wait."""
        return await self._call("find", self._driver.find_element, by, selector)

    async def element_exists(self, selector: str, *, by: str = By.CSS_SELECTOR) -> bool:
        elements = await self._call("element_exists", self._driver.find_elements, by, selector)
        return len(elements) > 0

    async def click(self, selector: str, *, timeout: float = DEFAULT_ELEMENT_TIMEOUT) -> None:
        """Wait for an element to become clickable, then click it."""
        def click():
            WebDriverWait(self._driver, timeout).until(
                EC.element_to_be_clickable((By.CSS_SELECTOR, selector))
            ).click()

        try:
            await self._call("click", click)
        except ElementTimeoutError as e:
            raise ElementTimeoutError(
                f"Timed out after {timeout}s waiting to click {selector!r}",
                timeout=timeout,
                method="click",
            ) from e

    async def set_text(
        self,
        selector: str,
        text: str,
        *,
        clear_existing: bool = True,
        timeout: float = DEFAULT_ELEMENT_TIMEOUT,
    ) -> None:
        """Type text into an input element."""
        element = await self.wait_for_element(selector, timeout=timeout, visible=True)

        def type_text():
            if clear_existing:
                element.clear()
            element.send_keys(text)

        await self._call("set_text", type_text)

    async def get_text(self, selector: str, *, timeout: float = DEFAULT_ELEMENT_TIMEOUT) -> str:
        """Get the visible text of an element."""
        element = await self.wait_for_element(selector, timeout=timeout)
        return await self._call("get_text", lambda: element.text)

    # =========================================================================
    # Screenshots
    # =========================================================================

    async def screenshot(self, path: str) -> str:
        """
        Save a PNG screenshot of the current window.

        Args:
            path: Destination file path, should end in .png.

        Returns:
            The path that was written.
        """
        saved = await self._call("screenshot", self._driver.save_screenshot, path)
        if saved is False:
            raise DriverSessionError(f"Could not write screenshot to {path}", method="screenshot")
        return path
