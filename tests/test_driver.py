"""
Tests for the ExtendedWebDriver wrapper.

Run with: pytest tests/test_driver.py -v
"""
import pytest
from selenium.common.exceptions import NoSuchElementException, WebDriverException
from selenium.webdriver.common.by import By

from browser_e2e.core.errors import DriverSessionError, ElementTimeoutError
from browser_e2e.driver import ExtendedWebDriver


# =============================================================================
# Session and navigation
# =============================================================================

class TestSession:
    """Tests for timeouts, quitting and delegation."""

    @pytest.mark.asyncio
    async def test_configure_timeouts(self, extended_driver, raw_driver):
        await extended_driver.configure_timeouts(implicit_wait=1.0, page_load_timeout=10.0)

        raw_driver.implicitly_wait.assert_called_once_with(1.0)
        raw_driver.set_page_load_timeout.assert_called_once_with(10.0)

    @pytest.mark.asyncio
    async def test_quit(self, extended_driver, raw_driver):
        await extended_driver.quit()
        raw_driver.quit.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_context_manager_quits(self, raw_driver):
        async with ExtendedWebDriver(raw_driver) as driver:
            assert driver.driver is raw_driver
        raw_driver.quit.assert_called_once_with()

    def test_delegates_unknown_attributes(self, extended_driver, raw_driver):
        raw_driver.session_id = "abc123"
        assert extended_driver.session_id == "abc123"

    @pytest.mark.asyncio
    async def test_webdriver_errors_are_wrapped(self, extended_driver, raw_driver):
        raw_driver.get.side_effect = WebDriverException("session deleted")

        with pytest.raises(DriverSessionError, match="session deleted") as exc_info:
            await extended_driver.load_url("https://example.com")

        assert exc_info.value.method == "load_url"


class TestNavigation:
    """Tests for navigation helpers."""

    @pytest.mark.asyncio
    async def test_load_url(self, extended_driver, raw_driver):
        await extended_driver.load_url("https://example.com")
        raw_driver.get.assert_called_once_with("https://example.com")

    @pytest.mark.asyncio
    async def test_get_url_and_title(self, extended_driver):
        assert await extended_driver.get_url() == "https://example.com/"
        assert await extended_driver.get_title() == "Example Domain"

    @pytest.mark.asyncio
    async def test_execute_script(self, extended_driver, raw_driver):
        raw_driver.execute_script.return_value = 42

        result = await extended_driver.execute_script("return arguments[0] * 2", 21)

        assert result == 42
        raw_driver.execute_script.assert_called_once_with("return arguments[0] * 2", 21)


# =============================================================================
# Elements
# =============================================================================

class TestElements:
    """Tests for element helpers."""

    @pytest.mark.asyncio
    async def test_wait_for_element_returns_element(self, extended_driver, raw_driver):
        element = raw_driver.find_element.return_value

        result = await extended_driver.wait_for_element("#app", timeout=1)

        assert result is element
        raw_driver.find_element.assert_called_with(By.CSS_SELECTOR, "#app")

    @pytest.mark.asyncio
    async def test_wait_for_element_times_out(self, extended_driver, raw_driver):
        raw_driver.find_element.side_effect = NoSuchElementException("nope")

        with pytest.raises(ElementTimeoutError) as exc_info:
            await extended_driver.wait_for_element("#missing", timeout=0.2)

        assert exc_info.value.timeout == 0.2
        assert "#missing" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_element_exists(self, extended_driver, raw_driver):
        raw_driver.find_elements.return_value = []
        assert not await extended_driver.element_exists(".banner")

        raw_driver.find_elements.return_value = [object()]
        assert await extended_driver.element_exists(".banner")

    @pytest.mark.asyncio
    async def test_click(self, extended_driver, raw_driver):
        element = raw_driver.find_element.return_value
        element.is_displayed.return_value = True
        element.is_enabled.return_value = True

        await extended_driver.click("button.submit", timeout=1)

        element.click.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_set_text_clears_first(self, extended_driver, raw_driver):
        element = raw_driver.find_element.return_value
        element.is_displayed.return_value = True

        await extended_driver.set_text("input[name=q]", "hello", timeout=1)

        element.clear.assert_called_once_with()
        element.send_keys.assert_called_once_with("hello")

    @pytest.mark.asyncio
    async def test_set_text_can_append(self, extended_driver, raw_driver):
        element = raw_driver.find_element.return_value
        element.is_displayed.return_value = True

        await extended_driver.set_text("input[name=q]", "more", clear_existing=False, timeout=1)

        element.clear.assert_not_called()
        element.send_keys.assert_called_once_with("more")

    @pytest.mark.asyncio
    async def test_get_text(self, extended_driver, raw_driver):
        raw_driver.find_element.return_value.text = "Welcome"
        assert await extended_driver.get_text("h1", timeout=1) == "Welcome"


# =============================================================================
# Screenshots
# =============================================================================

class TestScreenshot:
    """Tests for saving screenshots."""

    @pytest.mark.asyncio
    async def test_screenshot_returns_path(self, extended_driver, raw_driver, tmp_path):
        path = str(tmp_path / "shot.png")

        assert await extended_driver.screenshot(path) == path
        raw_driver.save_screenshot.assert_called_once_with(path)

    @pytest.mark.asyncio
    async def test_screenshot_failure_raises(self, extended_driver, raw_driver, tmp_path):
        raw_driver.save_screenshot.return_value = False

        with pytest.raises(DriverSessionError, match="Could not write screenshot"):
            await extended_driver.screenshot(str(tmp_path / "shot.png"))
