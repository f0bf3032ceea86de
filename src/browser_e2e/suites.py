"""
Test Suites - Registers one pytest test class per browser environment.

Usage (the browser_e2e.plugin pytest plugin is loaded automatically once installed):

    from browser_e2e import browser_test_suite

    @browser_test_suite("sign in")
    class SignInTests:
        @pytest.mark.asyncio
        async def test_loads_home_page(self):
            await self.inputs.driver.load_url(self.inputs.browser_host_url)
            assert await self.inputs.driver.element_exists("#app")

Each generated class opens its WebDriver session once, saves a screenshot for
every failed test, and quits the session when the class is done.
"""
from __future__ import annotations

import asyncio
import logging
import os
import re
import sys
import time
import uuid
from typing import Any, Coroutine, Dict, Iterable, List, Optional, Set, TypeVar

import pytest

from browser_e2e.config import E2EConfig, get_config
from browser_e2e.core.errors import DriverSessionError
from browser_e2e.core.models import TestEnvironment, TestInputs
from browser_e2e.driver import ExtendedWebDriver
from browser_e2e.environments import get_test_environments

logger = logging.getLogger("browser_e2e")

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion on a private event loop.

    Tasks the coroutine left behind (such as quitting a session that arrived
    after the setup timeout) are finished before the loop is closed.
    """
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        pending = asyncio.all_tasks(loop)
        if pending:
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.close()


# =============================================================================
# Session helpers
# =============================================================================

_late_cleanups: Set["asyncio.Task[None]"] = set()


async def _quit_late_driver(task: "asyncio.Future[ExtendedWebDriver]", description: str) -> None:
    try:
        driver = await task
    except Exception as e:
        logger.debug(f"Driver creation for {description} failed after the setup timeout: {e}")
        return
    logger.warning(f"WebDriver session for {description} was created after the setup timeout, quitting it")
    try:
        await driver.quit()
    except Exception as e:
        logger.warning(f"Error disposing late driver [{description}]: {e}")


async def acquire_driver(environment: TestEnvironment, timeout: float) -> ExtendedWebDriver:
    """
    Create the environment's driver, giving up after `timeout` seconds.

    Session creation runs in a worker thread and cannot be interrupted, so on
    timeout it is left to finish and any session it returns is quit.

    Raises:
        DriverSessionError: The session could not be created in time.
    """
    task = asyncio.ensure_future(environment.create_driver())
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
    except asyncio.TimeoutError as e:
        cleanup = asyncio.ensure_future(_quit_late_driver(task, environment.description))
        _late_cleanups.add(cleanup)
        cleanup.add_done_callback(_late_cleanups.discard)
        raise DriverSessionError(
            f"Timed out after {timeout}s creating a WebDriver session",
            environment=environment.description,
            method="acquire_driver",
        ) from e


def screenshot_path(directory: str) -> str:
    """Build a unique screenshot-<unix seconds>-<random>.png path inside directory."""
    return os.path.join(directory, f"screenshot-{int(time.time())}-{uuid.uuid4().hex[:6]}.png")


async def capture_failure_screenshot(driver: ExtendedWebDriver, directory: str) -> Optional[str]:
    """
    Save a screenshot after a test failure.

    Best effort: errors are logged and None is returned, so a broken session
    never hides the original test failure.
    """
    try:
        os.makedirs(directory, exist_ok=True)
        path = await driver.screenshot(screenshot_path(directory))
    except Exception as e:
        logger.warning(f"Error trying to create screenshot after test failure: {e}")
        return None
    logger.info(f"screenshot for failure saved to {path}")
    return path


async def dispose_driver(inputs: TestInputs) -> None:
    """Quit the suite's driver, if any. Errors are logged, not raised."""
    driver = inputs.detach_driver()
    if driver is None:
        return
    try:
        await driver.quit()
    except Exception as e:
        logger.warning(f"Error disposing driver after tests [{inputs.env_desc}]: {e}")


_REPORTS_WARNED = pytest.StashKey[bool]()


def _warn_reports_missing(config: pytest.Config) -> None:
    if config.stash.get(_REPORTS_WARNED, False):
        return
    config.stash[_REPORTS_WARNED] = True
    logger.warning(
        "Test reports are not recorded because the browser_e2e.plugin pytest plugin is not "
        "loaded, failure screenshots are disabled"
    )


# =============================================================================
# Suite base class
# =============================================================================

class BrowserTestSuite:
    """
    Base class mixed into every generated per-environment test class.

    Test methods read `self.inputs` (env_desc, browser_host_url, driver).
    """

    __test__ = False

    suite_title: str = ""
    environment: TestEnvironment
    config: E2EConfig
    inputs: TestInputs

    @pytest.fixture(scope="class", autouse=True)
    def _browser_session(self, request):
        cls = request.cls
        inputs = TestInputs(
            env_desc=cls.environment.description,
            browser_host_url=cls.config.browser_host_url,
        )
        cls.inputs = inputs

        if cls.config.browserstack.local_enabled:
            tunnels = request.getfixturevalue("local_tunnel")
            run_sync(tunnels.ensure_started(cls.config))

        logger.info(f"create selenium webdriver for {cls.suite_title}")
        inputs.attach_driver(run_sync(acquire_driver(cls.environment, cls.config.setup_timeout)))
        yield inputs
        run_sync(dispose_driver(inputs))

    @pytest.fixture(autouse=True)
    def _screenshot_on_failure(self, request):
        yield
        if not hasattr(request.node, "rep_setup"):
            _warn_reports_missing(request.config)
            return
        report = getattr(request.node, "rep_call", None)
        if report is None or not report.failed or not self.inputs.has_driver:
            return
        run_sync(capture_failure_screenshot(self.inputs.driver, self.config.screenshot_dir))


# =============================================================================
# Registration
# =============================================================================

def _camel_case(title: str) -> str:
    return "".join(word.capitalize() for word in re.split(r"[^0-9A-Za-z]+", title) if word)


def _class_name(title: str, description: str, namespace: Dict[str, Any]) -> str:
    env = re.sub(r"[^0-9A-Za-z]+", "_", description).strip("_")
    base = f"Test{_camel_case(title)}_{env}"
    name, n = base, 2
    while name in namespace:
        name, n = f"{base}_{n}", n + 1
    return name


def create_test_suites(
    title: str,
    define_tests: type,
    *,
    config: Optional[E2EConfig] = None,
    environments: Optional[Iterable[TestEnvironment]] = None,
    namespace: Optional[Dict[str, Any]] = None,
) -> List[type]:
    """
    Create one test class per environment from the tests defined on `define_tests`.

    Args:
        title: Suite title; each class is titled "<title> [<environment>]".
        define_tests: Class holding the test methods. It is never collected itself.
        config: Run configuration. Defaults to the process-wide config.
        environments: Environments to use instead of the configured ones.
        namespace: Where to register the classes so pytest collects them.
            Defaults to the module that defines `define_tests`.

    Returns:
        The generated test classes, in environment order.
    """
    config = config or get_config()
    if environments is None:
        environments = get_test_environments(config)
    if namespace is None:
        namespace = vars(sys.modules[define_tests.__module__])

    define_tests.__test__ = False

    suites = []
    for environment in environments:
        suite_title = f"{title} [{environment.description}]"
        name = _class_name(title, environment.description, namespace)
        suite = type(name, (define_tests, BrowserTestSuite), {
            "__test__": True,
            "__module__": define_tests.__module__,
            "__qualname__": name,
            "__doc__": suite_title,
            "suite_title": suite_title,
            "environment": environment,
            "config": config,
            "pytestmark": [pytest.mark.e2e],
        })
        namespace[name] = suite
        suites.append(suite)
        logger.debug(f"Registered suite {suite_title} as {name}")
    return suites


def browser_test_suite(title: str, **kwargs):
    """Decorator form of create_test_suites."""
    def decorator(cls):
        create_test_suites(title, cls, **kwargs)
        return cls
    return decorator
