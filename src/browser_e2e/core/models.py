"""
Browser E2E Models - Data classes describing test environments and suite inputs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional

from browser_e2e.core.errors import DriverSessionError

if TYPE_CHECKING:
    from browser_e2e.driver import ExtendedWebDriver


DriverFactory = Callable[[], Awaitable["ExtendedWebDriver"]]


@dataclass
class TestEnvironment:
    """
    A browser/OS combination that tests can run against.

    The driver is not created until `create_driver` is awaited, so enumerating
    environments is cheap and never opens a session.
    """

    __test__ = False

    description: str
    create_driver: DriverFactory
    browser_name: Optional[str] = None
    capabilities: Optional[Dict[str, Any]] = None


@dataclass
class TestInputs:
    """
    Per-suite values handed to the test bodies.

    The driver is attached by the suite setup step. Accessing it before then
    raises DriverSessionError instead of handing out a half-built session.
    """

    __test__ = False

    env_desc: str
    browser_host_url: str
    _driver: Optional["ExtendedWebDriver"] = field(default=None, repr=False)

    @property
    def driver(self) -> "ExtendedWebDriver":
        if self._driver is None:
            raise DriverSessionError(
                "WebDriver is not ready yet; it is created in the suite setup step",
                environment=self.env_desc,
            )
        return self._driver

    @property
    def has_driver(self) -> bool:
        return self._driver is not None

    def attach_driver(self, driver: "ExtendedWebDriver") -> None:
        self._driver = driver

    def detach_driver(self) -> Optional["ExtendedWebDriver"]:
        """Remove and return the driver, if one was attached."""
        driver, self._driver = self._driver, None
        return driver
